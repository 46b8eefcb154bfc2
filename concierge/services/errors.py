"""Domain errors raised inside the reservation services.

Each error carries an :class:`ErrorKind` so the action boundary can report
it to callers (and the HTTP layer can map it to a status code) without
inspecting exception types.
"""

import enum


class ErrorKind(str, enum.Enum):
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    OVERLAP = "overlap"
    INFRASTRUCTURE = "infrastructure"


class ReservationError(Exception):
    """Base class for errors surfaced to orchestrator callers."""

    kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthorizationError(ReservationError):
    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str = "Only administrators can manage reservations") -> None:
        super().__init__(message)


class ValidationError(ReservationError):
    """Malformed or semantically invalid input.

    ``field_errors`` maps a field name to its message when the problem can be
    pinned to one field.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(ReservationError):
    kind = ErrorKind.NOT_FOUND


class OverlapError(ReservationError):
    kind = ErrorKind.OVERLAP

    def __init__(self, message: str = "Dates conflict with an existing reservation on this unit") -> None:
        super().__init__(message)


class InfrastructureError(ReservationError):
    kind = ErrorKind.INFRASTRUCTURE
