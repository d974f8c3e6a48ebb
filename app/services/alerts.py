"""Warranty, maintenance and alignment alert rules.

All functions are pure and take ``today`` explicitly so callers (and tests)
control the clock.
"""

import calendar
from datetime import date
from typing import Any

from app.core.enums import (
    ALIGNMENT_INTERVAL_KMS,
    MAINTENANCE_CHECK_MONTHS,
    WARRANTY_EXPIRING_DAYS,
    ServiceType,
    WarrantyState,
)
from app.models.records import MaintenanceAlert, ServiceRecord, TyrePurchase, Vehicle
from app.utils.converters import to_date


def days_until(end_date: date | str | None, today: date) -> int | None:
    end = to_date(end_date)
    if end is None:
        return None
    return (end - today).days


def warranty_status(end_date: date | str | None, today: date) -> tuple[WarrantyState, int]:
    """Classify a warranty by its end date.

    Returns:
        (state, days) where days is the days remaining, or the days since
        expiry for an expired warranty. Unknown warranties report 0 days.
    """
    days = days_until(end_date, today)
    if days is None:
        return WarrantyState.UNKNOWN, 0
    if days < 0:
        return WarrantyState.EXPIRED, abs(days)
    if days < WARRANTY_EXPIRING_DAYS:
        return WarrantyState.EXPIRING, days
    return WarrantyState.ACTIVE, days


def is_warranty_expiring_soon(end_date: date | str | None, today: date) -> bool:
    """True when the warranty ends within the next 30 days (not today or earlier)."""
    days = days_until(end_date, today)
    if days is None:
        return False
    return 0 < days <= WARRANTY_EXPIRING_DAYS


def _is_month_end(d: date) -> bool:
    return d.day == calendar.monthrange(d.year, d.month)[1]


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end (negative if end is earlier).

    A month counts as complete once the end date reaches the start's day of
    month, or the last day of the end month when that month is shorter.

    Examples:
        >>> months_between(date(2024, 1, 31), date(2024, 2, 29))
        1
        >>> months_between(date(2024, 1, 31), date(2024, 2, 28))
        0
        >>> months_between(date(2024, 1, 15), date(2024, 4, 15))
        3
    """
    if end < start:
        return -months_between(end, start)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day and not _is_month_end(end):
        months -= 1
    return months


def maintenance_alerts(
    purchases: list[TyrePurchase],
    vehicles: dict[str, Vehicle],
    today: date,
) -> list[MaintenanceAlert]:
    """Purchases old enough to warrant a tyre check."""
    alerts: list[MaintenanceAlert] = []
    for purchase in purchases:
        months = months_between(purchase.purchase_date, today)
        if months >= MAINTENANCE_CHECK_MONTHS:
            alerts.append(
                MaintenanceAlert(
                    purchase_id=purchase.id,
                    tyre_brand=purchase.tyre_brand,
                    purchase_date=purchase.purchase_date,
                    months_since_purchase=months,
                    vehicle=vehicles.get(purchase.vehicle_id),
                )
            )
    return alerts


def last_alignment(
    vehicle_id: str, services: list[ServiceRecord]
) -> ServiceRecord | None:
    """Most recent wheel alignment recorded for a vehicle."""
    alignments = [
        s
        for s in services
        if s.vehicle_id == vehicle_id and s.service_type == ServiceType.WHEEL_ALIGNMENT
    ]
    if not alignments:
        return None
    return max(alignments, key=lambda s: (s.service_date, s.current_kms))


def needs_alignment(
    service: ServiceRecord,
    services: list[ServiceRecord],
    vehicles: dict[str, Vehicle],
) -> bool:
    """Whether the service's vehicle has driven 5000 km since its last alignment."""
    vehicle = vehicles.get(service.vehicle_id)
    alignment = last_alignment(service.vehicle_id, services)
    if vehicle is None or alignment is None:
        return False
    return vehicle.current_kms - alignment.current_kms >= ALIGNMENT_INTERVAL_KMS


def index_vehicles(rows: list[dict[str, Any]]) -> dict[str, Vehicle]:
    vehicles = [Vehicle.from_row(row) for row in rows]
    return {v.id: v for v in vehicles}
