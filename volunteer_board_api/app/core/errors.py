"""
Domain errors raised by the service layer.

Every error derives from ``ServiceError`` (itself a ``ValueError``, the
exception type services have always raised for rejected operations)
and carries a short machine readable ``code``.  The actions layer and
the API endpoints use the code to pick a result or an HTTP status.
"""


class ServiceError(ValueError):
    """Base class for rejected or failed service operations."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """A referenced user, report or notification does not exist.

    Also used when a notification exists but belongs to someone else,
    so callers cannot discover foreign ids.
    """

    code = "not_found"


class UnauthorizedError(ServiceError):
    """The acting user lacks the role required for the operation."""

    code = "unauthorized"


class InvalidOperationError(ServiceError):
    """The request is well formed but not allowed (self-block, self-report, ...)."""

    code = "invalid_operation"


class StorageError(ServiceError):
    """Reading or writing a collection file failed."""

    code = "storage_failure"
