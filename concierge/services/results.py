"""Success/error envelope returned by every orchestrator entry point."""

from dataclasses import dataclass, field
from typing import Any

from concierge.services.errors import ErrorKind, ReservationError, ValidationError


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a mutating action. Callers never see raised exceptions."""

    success: bool
    message: str | None = None
    data: dict[str, Any] | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, data: dict[str, Any] | None = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, exc: ReservationError) -> "ActionResult":
        field_errors = exc.field_errors if isinstance(exc, ValidationError) else {}
        return cls(
            success=False,
            error=exc.message,
            error_kind=exc.kind,
            field_errors=dict(field_errors),
        )
