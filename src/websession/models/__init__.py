"""Session data models.

Exports:
    - KeyLookup: Parsed ``source:name`` identifier location
    - SessionRecord: In-memory session data plus lifecycle flags

SessionConfig lives in ``websession.models.config`` and SessionSettings in
``websession.models.settings``.
"""

from .lookup import KeyLookup
from .record import SessionRecord

__all__ = ["KeyLookup", "SessionRecord"]
