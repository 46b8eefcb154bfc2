"""Pydantic v2 request/response schemas for reservation endpoints."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from concierge.models.enums import BookingPlatform, PaymentStatus, ReservationStatus
from concierge.schemas.mission import MissionResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ReservationInput(BaseModel):
    """Full reservation form, used for both creation and update."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    unit_id: uuid.UUID
    guest_name: str = Field(..., min_length=1, max_length=200)
    guest_email: EmailStr | None = None
    guest_phone: str | None = Field(None, max_length=30)
    guest_count: int = Field(1, ge=1, le=50)
    check_in_date: date
    check_in_time: time | None = None
    check_out_date: date
    check_out_time: time | None = None
    platform: BookingPlatform = BookingPlatform.DIRECT
    amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: ReservationStatus = ReservationStatus.CONFIRMED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_date: date | None = None
    notes: str | None = Field(None, max_length=5000)
    access_instructions: str | None = Field(None, max_length=5000)

    @field_validator("guest_email", "guest_phone", "notes", "access_instructions", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        """Forms post empty strings for untouched optional fields."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("check_out_date")
    @classmethod
    def check_dates(cls, value: date, info: ValidationInfo) -> date:
        """Validate that check_out_date is strictly after check_in_date."""
        check_in = info.data.get("check_in_date")
        if check_in is not None and value <= check_in:
            raise ValueError("check_out_date must be after check_in_date")
        return value


class BulkReservationRequest(BaseModel):
    """Ids for a bulk cancel/delete. Bounds are enforced by the service."""

    ids: list[str]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReservationResponse(BaseModel):
    """Standard reservation response."""

    id: uuid.UUID
    organisation_id: uuid.UUID
    unit_id: uuid.UUID
    guest_name: str
    guest_email: str | None = None
    guest_phone: str | None = None
    guest_count: int
    check_in_date: date
    check_in_time: time | None = None
    check_out_date: date
    check_out_time: time | None = None
    platform: str
    amount: Decimal | None = None
    status: str
    payment_status: str
    payment_date: date | None = None
    notes: str | None = None
    access_instructions: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RevenueResponse(BaseModel):
    """Ledger entry of a reservation."""

    id: uuid.UUID
    reservation_id: uuid.UUID
    unit_id: uuid.UUID
    contract_id: uuid.UUID | None = None
    gross_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    net_amount: Decimal
    check_in_date: date
    check_out_date: date

    model_config = ConfigDict(from_attributes=True)


class ReservationDetailResponse(ReservationResponse):
    """Reservation with its derived missions and ledger entry."""

    missions: list[MissionResponse] = []
    revenue: RevenueResponse | None = None


class ReservationListResponse(BaseModel):
    """Paginated list of reservations."""

    items: list[ReservationResponse]
    total: int
