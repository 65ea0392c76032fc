"""
Error taxonomy for the bug service.

Every error carries a stable ``code`` for programmatic handling, the HTTP
``status_code`` the API layer answers with, and a ``to_dict()`` body.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single violated field constraint."""

    field: str
    message: str


class BugTrackerError(Exception):
    """Base class for errors surfaced by the bug service."""

    code = "BUG_TRACKER_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(BugTrackerError):
    """Raised when input violates field constraints.

    Attributes:
        errors: every violated field, not just the first one found
    """

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(f"Invalid bug data: {fields}")

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = [e.model_dump() for e in self.errors]
        return body


class NotFoundError(BugTrackerError):
    """Raised when the referenced bug id has no live record."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, bug_id: str):
        self.bug_id = bug_id
        super().__init__(f"Bug {bug_id} not found")

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["id"] = self.bug_id
        return body


class StorageError(BugTrackerError):
    """Raised when the persistence layer is unreachable or returns a fault."""

    code = "STORAGE_ERROR"
    status_code = 500

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage failure during {operation}")

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["operation"] = self.operation
        return body
