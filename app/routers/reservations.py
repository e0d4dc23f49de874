import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import User, Reservation, Restaurant
from app.schemas.reservation import (
    ReservationResponse,
    ReservationListResponse,
    ReservationSummaryResponse,
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationUpdate
)
from app.services import reservation_service
from app.services.time_buckets import get_timezone
from app.utils.security import get_current_user, accessible_restaurant_ids

logger = logging.getLogger("app.routers.reservations")

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _scoped_restaurant_ids(db: Session, user: User, restaurant_id: Optional[UUID]) -> list[UUID]:
    """Zugängliche Restaurants, optional auf eines eingeschränkt"""
    allowed = accessible_restaurant_ids(db, user)
    if restaurant_id is None:
        return allowed
    if restaurant_id not in allowed:
        raise HTTPException(status_code=404, detail="Restaurant nicht gefunden")
    return [restaurant_id]


def _get_reservation(db: Session, user: User, id: UUID) -> Reservation:
    reservation = db.query(Reservation).filter(
        Reservation.id == id,
        Reservation.tenant_id == user.tenant_id
    ).first()

    # 404 auch bei fehlendem Zugriff, damit keine fremden IDs erraten werden
    if not reservation or reservation.restaurant_id not in accessible_restaurant_ids(db, user):
        raise HTTPException(status_code=404, detail="Reservierung nicht gefunden")
    return reservation


@router.get("", response_model=ReservationListResponse)
def get_reservations(
    q: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    date_from: Optional[datetime] = Query(default=None, alias="from"),
    date_to: Optional[datetime] = Query(default=None, alias="to"),
    restaurant_id: Optional[UUID] = Query(default=None),
    limit: int = Query(default=reservation_service.DEFAULT_PAGE_SIZE, ge=1, le=200),
    cursor: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Reservierungen des eigenen Tenants, neueste zuerst.
    Für die nächste Seite next_cursor als cursor mitschicken.
    """
    restaurant_ids = _scoped_restaurant_ids(db, current_user, restaurant_id)
    try:
        rows, next_cursor = reservation_service.list_reservations(
            db,
            current_user.tenant_id,
            restaurant_ids=restaurant_ids,
            q=q,
            status=status,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            cursor=cursor
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ReservationListResponse(data=rows, next_cursor=next_cursor)


@router.get("/summary", response_model=ReservationSummaryResponse)
def get_reservation_summary(
    restaurant_id: Optional[UUID] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    restaurant_ids = _scoped_restaurant_ids(db, current_user, restaurant_id)

    # Tagesgrenzen in der Zeitzone des Restaurants, sonst Betriebszeitzone
    tz_name = None
    if restaurant_id:
        tz_name = db.query(Restaurant.timezone).filter(Restaurant.id == restaurant_id).scalar()
    tz = get_timezone(tz_name)

    counts = reservation_service.reservation_summary(db, current_user.tenant_id, tz, restaurant_ids)
    return ReservationSummaryResponse(**counts)


@router.get("/{id}", response_model=ReservationResponse)
def get_reservation(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _get_reservation(db, current_user, id)


@router.post("", response_model=ReservationResponse, status_code=201)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if data.restaurant_id not in accessible_restaurant_ids(db, current_user):
        raise HTTPException(status_code=404, detail="Restaurant nicht gefunden")

    reservation = Reservation(
        tenant_id=current_user.tenant_id,
        restaurant_id=data.restaurant_id,
        name=data.name,
        phone=data.phone,
        party_size=data.party_size,
        datetime_utc=data.datetime_utc,
        notes=data.notes,
        source=data.source,
        status=data.status.value
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)

    logger.info(f"Reservierung {reservation.id} ({reservation.party_size} Pers.) angelegt von {current_user.email}")
    return reservation


@router.patch("/{id}/status", response_model=ReservationResponse)
def update_reservation_status(
    id: UUID,
    data: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reservation = _get_reservation(db, current_user, id)

    old_status = reservation.status
    reservation.status = data.status.value
    db.commit()
    db.refresh(reservation)

    logger.info(f"Reservierung {reservation.id}: Status {old_status} -> {reservation.status}")
    return reservation


@router.patch("/{id}", response_model=ReservationResponse)
def update_reservation(
    id: UUID,
    data: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    reservation = _get_reservation(db, current_user, id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(reservation, field, value)

    db.commit()
    db.refresh(reservation)
    return reservation
