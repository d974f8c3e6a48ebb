"""FastAPI route definitions for the Tyre Manager API."""

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.api.deps import get_auth_service, get_bearer_token, get_current_user, get_data_store
from app.core.logging import logger
from app.core.rate_limit import calculator_limit, limiter
from app.models.auth import AuthSession, AuthUser, SignInRequest, SignUpRequest
from app.models.records import (
    Booking,
    BookingCreate,
    Dealer,
    MaintenanceAlert,
    PurchaseView,
    ServiceRecord,
    ServiceRecordCreate,
    ServiceView,
    TyrePurchase,
    TyrePurchaseCreate,
    Vehicle,
    VehicleCreate,
    VehicleUpdate,
    WarrantyView,
)
from app.models.tyre import CompareRequest, CompareResponse
from app.services.alerts import (
    index_vehicles,
    is_warranty_expiring_soon,
    maintenance_alerts,
    needs_alignment,
    warranty_status,
)
from app.services.auth import AuthError, AuthService
from app.services.data_store import DataStore, Filter
from app.services.tyre_calculator import compare_sizes
from app.utils.tire_math import TyreSizeFormatError

router = APIRouter()

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
Store = Annotated[DataStore, Depends(get_data_store)]


def get_today() -> date:
    """Dependency for the reference date used by alert rules."""
    return date.today()


Today = Annotated[date, Depends(get_today)]


def _owned(user: AuthUser, *filters: Filter) -> list[Filter]:
    return [Filter("user_id", "eq", user.id), *filters]


def _require_vehicle(store: DataStore, user: AuthUser, vehicle_id: str) -> dict[str, Any]:
    row = store.get("vehicles", _owned(user, Filter("id", "eq", vehicle_id)))
    if row is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return row


def _user_vehicles(store: DataStore, user: AuthUser) -> dict[str, Vehicle]:
    return index_vehicles(store.select("vehicles", _owned(user)))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@router.post("/auth/sign-up", response_model=AuthUser, status_code=201)
async def sign_up(
    req: SignUpRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Create an account. The user confirms their email before signing in."""
    try:
        return auth.sign_up(req.email, req.password, req.full_name, req.mobile_number)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/auth/sign-in", response_model=AuthSession)
async def sign_in(
    req: SignInRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    try:
        return auth.sign_in(req.email, req.password)
    except AuthError:
        raise HTTPException(status_code=401, detail="Invalid email or password")


@router.post("/auth/sign-out", status_code=204)
async def sign_out(
    token: Annotated[str, Depends(get_bearer_token)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    try:
        auth.sign_out(token)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(status_code=204)


@router.get("/auth/session", response_model=AuthUser)
async def current_session(user: CurrentUser):
    """Return the user behind the bearer token."""
    return user


# ---------------------------------------------------------------------------
# Tyre size calculator
# ---------------------------------------------------------------------------


@router.post("/calculator/compare", response_model=CompareResponse)
@limiter.limit(calculator_limit)
async def calculator_compare(request: Request, req: CompareRequest):
    """Compare a new tyre size against the current one.

    Returns diameters, the percentage change, speedometer error and the ±3%
    fitment verdict. A malformed size in either field yields 422 with a
    single fixed message.
    """
    try:
        return compare_sizes(req.old_size, req.new_size)
    except TyreSizeFormatError as e:
        raise HTTPException(status_code=422, detail=e.message)


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------


@router.get("/vehicles", response_model=list[Vehicle])
async def list_vehicles(user: CurrentUser, store: Store):
    rows = store.select("vehicles", _owned(user), order_by="created_at", descending=True)
    return [Vehicle.from_row(row) for row in rows]


@router.post("/vehicles", response_model=Vehicle, status_code=201)
async def create_vehicle(req: VehicleCreate, user: CurrentUser, store: Store):
    row = store.insert("vehicles", {**req.model_dump(mode="json"), "user_id": user.id})
    logger.info(f"Vehicle {row.get('id')} registered for user {user.id}")
    return Vehicle.from_row(row)


@router.patch("/vehicles/{vehicle_id}", response_model=Vehicle)
async def update_vehicle(
    vehicle_id: str, req: VehicleUpdate, user: CurrentUser, store: Store
):
    values = req.model_dump(mode="json", exclude_unset=True)
    if not values:
        raise HTTPException(status_code=422, detail="No fields to update")
    rows = store.update("vehicles", values, _owned(user, Filter("id", "eq", vehicle_id)))
    if not rows:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return Vehicle.from_row(rows[0])


@router.delete("/vehicles/{vehicle_id}", status_code=204)
async def delete_vehicle(vehicle_id: str, user: CurrentUser, store: Store):
    rows = store.delete("vehicles", _owned(user, Filter("id", "eq", vehicle_id)))
    if not rows:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Tyre purchases / warranties
# ---------------------------------------------------------------------------


@router.get("/purchases", response_model=list[PurchaseView])
async def list_purchases(user: CurrentUser, store: Store, today: Today):
    """Purchase history, newest first, flagging warranties ending within 30 days."""
    vehicles = _user_vehicles(store, user)
    rows = store.select(
        "tyre_purchases", _owned(user), order_by="purchase_date", descending=True
    )
    views = []
    for row in rows:
        purchase = TyrePurchase(**row)
        views.append(
            PurchaseView(
                **purchase.model_dump(),
                vehicle=vehicles.get(purchase.vehicle_id),
                warranty_expiring_soon=is_warranty_expiring_soon(
                    purchase.warranty_end_date, today
                ),
            )
        )
    return views


@router.post("/purchases", response_model=TyrePurchase, status_code=201)
async def create_purchase(req: TyrePurchaseCreate, user: CurrentUser, store: Store):
    _require_vehicle(store, user, req.vehicle_id)
    row = store.insert("tyre_purchases", {**req.model_dump(mode="json"), "user_id": user.id})
    return TyrePurchase(**row)


@router.get("/warranties", response_model=list[WarrantyView])
async def list_warranties(user: CurrentUser, store: Store, today: Today):
    """Purchases carrying a warranty, soonest-ending first."""
    vehicles = _user_vehicles(store, user)
    rows = store.select(
        "tyre_purchases",
        _owned(user, Filter("warranty_start_date", "not_is", None)),
        order_by="warranty_end_date",
    )
    views = []
    for row in rows:
        purchase = TyrePurchase(**row)
        state, days = warranty_status(purchase.warranty_end_date, today)
        views.append(
            WarrantyView(
                **purchase.model_dump(),
                vehicle=vehicles.get(purchase.vehicle_id),
                warranty_state=state,
                days=days,
            )
        )
    return views


# ---------------------------------------------------------------------------
# Service records
# ---------------------------------------------------------------------------


@router.get("/services", response_model=list[ServiceView])
async def list_services(user: CurrentUser, store: Store):
    """Service history, newest first, flagging vehicles due for alignment."""
    vehicles = _user_vehicles(store, user)
    rows = store.select("services", _owned(user), order_by="service_date", descending=True)
    services = [ServiceRecord(**row) for row in rows]
    return [
        ServiceView(
            **service.model_dump(),
            vehicle=vehicles.get(service.vehicle_id),
            needs_alignment=needs_alignment(service, services, vehicles),
        )
        for service in services
    ]


@router.post("/services", response_model=ServiceRecord, status_code=201)
async def create_service(req: ServiceRecordCreate, user: CurrentUser, store: Store):
    """Record a service and move the vehicle's odometer to the recorded reading."""
    _require_vehicle(store, user, req.vehicle_id)
    row = store.insert("services", {**req.model_dump(mode="json"), "user_id": user.id})
    store.update(
        "vehicles",
        {"current_kms": req.current_kms},
        _owned(user, Filter("id", "eq", req.vehicle_id)),
    )
    return ServiceRecord(**row)


# ---------------------------------------------------------------------------
# Dealers / bookings
# ---------------------------------------------------------------------------


@router.get("/dealers", response_model=list[Dealer])
async def list_dealers(store: Store):
    rows = store.select("dealers", [Filter("is_active", "eq", True)], order_by="dealer_name")
    return [Dealer.from_row(row) for row in rows]


@router.get("/bookings", response_model=list[Booking])
async def list_bookings(user: CurrentUser, store: Store):
    rows = store.select("bookings", _owned(user), order_by="booking_date", descending=True)
    return [Booking.from_row(row) for row in rows]


@router.post("/bookings", response_model=Booking, status_code=201)
async def create_booking(req: BookingCreate, user: CurrentUser, store: Store):
    _require_vehicle(store, user, req.vehicle_id)
    dealer = store.get(
        "dealers", [Filter("id", "eq", req.dealer_id), Filter("is_active", "eq", True)]
    )
    if dealer is None:
        raise HTTPException(status_code=404, detail="Dealer not found")

    row = store.insert(
        "bookings",
        {**req.model_dump(mode="json"), "user_id": user.id, "status": "pending"},
    )
    logger.info(f"Booking {row.get('id')} created at dealer {req.dealer_id}")
    return Booking.from_row(row)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard/alerts")
async def dashboard_alerts(user: CurrentUser, store: Store, today: Today):
    """Tyre purchases due for a maintenance check (3+ months old)."""
    vehicles = _user_vehicles(store, user)
    purchases = [TyrePurchase(**row) for row in store.select("tyre_purchases", _owned(user))]
    alerts: list[MaintenanceAlert] = maintenance_alerts(purchases, vehicles, today)
    return {"maintenance_alerts": [a.model_dump(mode="json") for a in alerts]}
