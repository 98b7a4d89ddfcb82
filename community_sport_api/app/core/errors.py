"""
Error taxonomy shared by the service layer and the API routes.

Services raise subclasses of ``ServiceError``; each carries a
human‑readable ``message``, a stable ``kind`` tag and the HTTP status
the API layer should answer with.  Routes convert them with
``to_http_exception`` so clients always receive
``{"detail": {"kind": ..., "message": ...}}``.
"""

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base class for failures surfaced to API callers."""

    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed input, detected before any write."""

    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(ServiceError):
    """The caller does not own the record or lacks the required role."""

    kind = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(ServiceError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class AuthenticationError(ServiceError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamError(ServiceError):
    """The catalog store or identity provider failed.

    The message is generic; the original exception is logged where the
    error is raised and chained as ``__cause__``.
    """

    kind = "upstream"
    status_code = status.HTTP_502_BAD_GATEWAY


def to_http_exception(error: ServiceError) -> HTTPException:
    """Translate a ``ServiceError`` into an ``HTTPException``."""
    headers = None
    if isinstance(error, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(
        status_code=error.status_code,
        detail={"kind": error.kind, "message": error.message},
        headers=headers,
    )
