"""Enums mirroring the backend schema, plus alert thresholds."""

from enum import Enum


class ServiceType(str, Enum):
    """Maintenance services that can be recorded or booked."""

    WHEEL_ALIGNMENT = "wheel_alignment"
    WHEEL_BALANCING = "wheel_balancing"
    TYRE_ROTATION = "tyre_rotation"
    NITROGEN_FILLING = "nitrogen_filling"
    AIR_PRESSURE_CHECK = "air_pressure_check"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WarrantyState(str, Enum):
    """Warranty state derived from the end date."""

    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


# Warranty is "expiring" when fewer than this many days remain
WARRANTY_EXPIRING_DAYS = 30

# Tyre purchases older than this many months trigger a maintenance check
MAINTENANCE_CHECK_MONTHS = 3

# Wheel alignment is due every this many km
ALIGNMENT_INTERVAL_KMS = 5000
