"""
Error kinds raised by the tournament engine.

Every error carries a ``kind`` and, where one exists, the offending ``field``
so the service layer can build a user-facing message:
- InvalidInput: malformed or contradictory request
- NotFound: referenced record missing, or a match slot not yet resolved
- Unsupported: bracket discipline not implemented
- Conflict: concurrent update race reported by the persistence layer
"""
from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base exception for all engine errors."""
    kind = "EngineError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "detail": self.message, "field": self.field}

    def __repr__(self):
        return f"{self.__class__.__name__}(message={self.message!r}, field={self.field!r})"


class InvalidInput(EngineError):
    """Malformed or contradictory request."""
    kind = "InvalidInput"


class NotFound(EngineError):
    """Referenced match, competition or group does not exist."""
    kind = "NotFound"


class Unsupported(EngineError):
    """Requested bracket discipline is not implemented."""
    kind = "Unsupported"


class Conflict(EngineError):
    """Concurrent update detected by the persistence layer."""
    kind = "Conflict"
