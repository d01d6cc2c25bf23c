"""Error taxonomy for the loo7 tracker.

Every error carries a machine-readable ``kind`` so the API layer can map it
to a status code and the client can show the message as-is.

- NotFoundError: unknown student/loo7 id, or an id owned by another sheikh
- ValidationError: malformed or out-of-range input
- InvalidStateError: evaluating an already-completed loo7
- StoreError: backend I/O failure
"""

from __future__ import annotations


class Loo7Error(Exception):
    """Base error for the loo7 tracker."""

    kind: str = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON responses."""
        return {"error": self.kind, "detail": self.message}


class NotFoundError(Loo7Error):
    """Raised when a record does not exist for the requesting owner."""

    kind = "not_found"


class ValidationError(Loo7Error):
    """Raised when input is malformed or out of range."""

    kind = "validation_error"


class InvalidStateError(Loo7Error):
    """Raised when a transition is not allowed from the current status."""

    kind = "invalid_state"


class StoreError(Loo7Error):
    """Raised when the storage backend fails."""

    kind = "store_error"
