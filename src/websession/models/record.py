"""In-memory session record.

The record is plain data; lifecycle rules live in the Session handle that
exclusively owns it for one request.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional


@dataclass
class SessionRecord:
    """One session's key/value data plus lifecycle flags.

    Attributes:
        id: Session identifier (unsigned form)
        data: Session values keyed by string
        expiration: Per-record TTL override (None = store default)
        fresh: True if no backend entry existed at load time
        modified: True if any mutation happened since load
    """

    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    expiration: Optional[timedelta] = None
    fresh: bool = True
    modified: bool = False
