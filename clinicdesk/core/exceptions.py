"""Custom application exceptions."""

from typing import Any
from uuid import UUID


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, details: dict[str, Any] | None = None):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception.

    Also raised when a record exists but belongs to another practitioner, so
    callers cannot discover other practitioners' records.
    """

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthenticatedException(AppException):
    """No authenticated practitioner on the request."""

    def __init__(self, message: str = "Not authenticated"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class ValidationException(AppException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class RootUpdateException(AppException):
    """The root entity of an archive/restore cascade could not be updated."""

    def __init__(self, message: str, report: Any = None):
        """Initialize with 500 status code and the partial transition report."""
        self.report = report
        details = report.model_dump(mode="json") if report is not None else None
        super().__init__(message, status_code=500, details=details)


class PartialFailureException(AppException):
    """A multi-step create stopped after its first record was written."""

    def __init__(self, message: str, created_id: UUID | None = None):
        """Initialize with 500 status code and the id of the orphaned record."""
        self.created_id = created_id
        details = {"created_id": str(created_id)} if created_id else None
        super().__init__(message, status_code=500, details=details)


class StoreError(Exception):
    """Entity store failure, wrapping driver-level errors."""

    def __init__(self, message: str, conflict: bool = False):
        """Initialize with message and whether a uniqueness constraint was hit."""
        self.message = message
        self.conflict = conflict
        super().__init__(message)
