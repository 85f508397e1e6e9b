"""Tagged domain errors.

Every failure a service can report carries an ``ErrorKind``. The HTTP layer
maps the kind to a status code; message text is for humans only and is never
used for control flow.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_ERROR = "validation_error"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal_server_error"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INTERNAL: 500,
}


class DomainError(Exception):
    """Base error carrying a machine-readable kind.

    ``code`` refines the public ``error`` field when a kind needs a more
    specific tag (``token_expired``, ``no_active_gestion``). It defaults to
    the kind itself.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.message = message
        self.code = code or self.kind.value

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}(kind={self.kind.value!r}, message={self.message!r})"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    """Duplicate key or dependent rows prevent the write."""

    kind = ErrorKind.CONFLICT


class DomainValidationError(DomainError):
    """An entity invariant was violated (length, charset, range)."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class BadRequestError(DomainError):
    """The request is well-formed but not allowed in the current state."""

    kind = ErrorKind.BAD_REQUEST


class UnauthorizedError(DomainError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN


def error_body(error: str, message: str, **extra: Any) -> dict[str, Any]:
    """Uniform JSON error body: ``{error, message, timestamp}``."""
    body: dict[str, Any] = {
        "error": error,
        "message": message,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    body.update(extra)
    return body
