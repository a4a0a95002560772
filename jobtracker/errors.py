"""
Error types raised across JobTracker.

Validation and authorization errors always reach the caller. Storage errors
are caught at repository boundaries and logged, never shown to clients.
"""

from typing import Dict, List, NamedTuple


class FieldError(NamedTuple):
    field: str
    message: str


class JobTrackerError(Exception):
    """Base class for all JobTracker errors."""
    pass


class AuthorizationError(JobTrackerError):
    """Raised when a request carries no valid owner identity."""
    pass


class ValidationError(JobTrackerError):
    """Raised when job input violates one or more field constraints."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Validation failed: {summary}")

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def to_dict(self) -> Dict[str, object]:
        return {
            "error": "Validation failed",
            "fields": [{"field": e.field, "message": e.message} for e in self.errors],
        }


class NotFoundError(JobTrackerError):
    """Raised when a record is absent or belongs to another owner."""
    pass


class StorageError(JobTrackerError):
    """Wraps an unexpected failure from the persistence layer."""
    pass
