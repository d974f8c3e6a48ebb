"""Records stored in the backend: vehicles, purchases, services, bookings, dealers."""

from datetime import date, time
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.core.enums import BookingStatus, ServiceType, WarrantyState
from app.utils.converters import safe_int

# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------


class VehicleCreate(BaseModel):
    vehicle_brand: str = Field(..., min_length=1, max_length=100)
    vehicle_model: str = Field(..., min_length=1, max_length=100)
    vehicle_variant: Optional[str] = None
    vehicle_year: int = Field(..., ge=1900, le=2100)
    registration_number: str = Field(..., min_length=1, max_length=20)
    current_kms: int = Field(default=0, ge=0)
    kms_per_day: Optional[int] = Field(default=None, ge=0)
    kms_per_month: Optional[int] = Field(default=None, ge=0)


class VehicleUpdate(BaseModel):
    vehicle_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_variant: Optional[str] = None
    vehicle_year: Optional[int] = Field(default=None, ge=1900, le=2100)
    registration_number: Optional[str] = None
    current_kms: Optional[int] = Field(default=None, ge=0)
    kms_per_day: Optional[int] = Field(default=None, ge=0)
    kms_per_month: Optional[int] = Field(default=None, ge=0)


class Vehicle(VehicleCreate):
    id: str
    user_id: str
    current_kms: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Vehicle":
        """Build from a table row; current_kms is nullable in the table."""
        return cls(**{**row, "current_kms": safe_int(row.get("current_kms"))})


# ---------------------------------------------------------------------------
# Tyre purchases / warranties
# ---------------------------------------------------------------------------


class TyrePurchaseCreate(BaseModel):
    vehicle_id: str
    number_of_tyres: int = Field(default=4, ge=1, le=20)
    tyre_brand: str = Field(..., min_length=1, max_length=100)
    tyre_serial_number: Optional[str] = None
    purchase_date: date
    warranty_start_date: Optional[date] = None
    warranty_end_date: Optional[date] = None
    kms_at_purchase: Optional[int] = Field(default=None, ge=0)


class TyrePurchase(TyrePurchaseCreate):
    id: str
    user_id: str
    warranty_certificate_url: Optional[str] = None


class PurchaseView(TyrePurchase):
    vehicle: Optional[Vehicle] = None
    warranty_expiring_soon: bool = False


class WarrantyView(TyrePurchase):
    vehicle: Optional[Vehicle] = None
    warranty_state: WarrantyState
    days: int  # days remaining, or days since expiry


# ---------------------------------------------------------------------------
# Service records
# ---------------------------------------------------------------------------


class ServiceRecordCreate(BaseModel):
    vehicle_id: str
    service_type: ServiceType
    current_kms: int = Field(..., ge=0)
    service_date: date
    notes: Optional[str] = None


class ServiceRecord(ServiceRecordCreate):
    id: str
    user_id: str
    invoice_url: Optional[str] = None


class ServiceView(ServiceRecord):
    vehicle: Optional[Vehicle] = None
    needs_alignment: bool = False


# ---------------------------------------------------------------------------
# Dealers / bookings
# ---------------------------------------------------------------------------


class Dealer(BaseModel):
    id: str
    dealer_name: str
    address: str
    city: str
    state: str
    pincode: str
    contact_number: str
    email: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    google_map_link: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Dealer":
        """Build from a table row; a NULL is_active takes the column default."""
        if row.get("is_active") is None:
            row = {**row, "is_active": True}
        return cls(**row)


class BookingCreate(BaseModel):
    vehicle_id: str
    dealer_id: str
    service_type: ServiceType
    booking_date: date
    booking_time: time = time(10, 0)
    notes: Optional[str] = None


class Booking(BookingCreate):
    id: str
    user_id: str
    status: BookingStatus = BookingStatus.PENDING

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Booking":
        if row.get("status") is None:
            row = {**row, "status": BookingStatus.PENDING}
        return cls(**row)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class MaintenanceAlert(BaseModel):
    purchase_id: str
    tyre_brand: str
    purchase_date: date
    months_since_purchase: int
    vehicle: Optional[Vehicle] = None
