"""Translate orchestrator failures into HTTP errors."""

from fastapi import HTTPException, status

from concierge.services.errors import ErrorKind, ReservationError
from concierge.services.results import ActionResult

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.OVERLAP: status.HTTP_409_CONFLICT,
    ErrorKind.INFRASTRUCTURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _http_error(kind: ErrorKind, message: str, field_errors: dict[str, str] | None = None) -> HTTPException:
    detail: str | dict = message
    if field_errors:
        detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=STATUS_BY_KIND[kind], detail=detail)


def error_to_http(exc: ReservationError) -> HTTPException:
    return _http_error(exc.kind, exc.message, getattr(exc, "field_errors", None))


def ensure_success(result: ActionResult) -> ActionResult:
    """Return ``result`` unchanged, or raise the HTTP error matching its kind."""
    if result.success:
        return result
    raise _http_error(result.error_kind or ErrorKind.INFRASTRUCTURE, result.error or "Request failed", result.field_errors)
