"""Session audit backends.

Exports:
    - SessionAuditBackend: Abstract audit interface
    - LoggerAuditBackend: stdlib logging backend
    - NoOpAuditBackend: Default no-op backend
"""

from .base import SessionAuditBackend
from .logger import LoggerAuditBackend
from .noop import NoOpAuditBackend

__all__ = ["LoggerAuditBackend", "NoOpAuditBackend", "SessionAuditBackend"]
