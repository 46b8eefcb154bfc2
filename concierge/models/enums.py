"""Status and type vocabularies shared by models, schemas and services.

Values are stored as plain strings (``String`` columns), so these enums mix
in ``str`` and compare equal to the raw column values.
"""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    OPERATOR = "OPERATOR"
    OWNER = "OWNER"


class UnitStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ARCHIVED = "ARCHIVED"


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BookingPlatform(str, enum.Enum):
    AIRBNB = "AIRBNB"
    BOOKING = "BOOKING"
    DIRECT = "DIRECT"
    OTHER = "OTHER"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class MissionType(str, enum.Enum):
    CHECKIN = "CHECKIN"
    CHECKOUT = "CHECKOUT"
    CLEANING = "CLEANING"
    INTERVENTION = "INTERVENTION"
    URGENT = "URGENT"


class MissionStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class MissionPriority(str, enum.Enum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ContractType(str, enum.Enum):
    EXCLUSIVE = "EXCLUSIVE"
    SIMPLE = "SIMPLE"


class ContractStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    TERMINATED = "TERMINATED"


# Statuses that occupy a unit's calendar
OCCUPYING_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)

# Missions that reservation cancellation/deletion must leave untouched
SETTLED_MISSION_STATUSES = (MissionStatus.DONE.value, MissionStatus.CANCELLED.value)
