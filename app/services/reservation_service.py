import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo

from app.config import settings
from app.models.reservation import Reservation, ReservationStatus
from app.models.restaurant import Restaurant
from app.services.time_buckets import as_utc, local_date, local_midnight_utc, ONE_DAY

logger = logging.getLogger("app.services.reservation_service")

DEFAULT_PAGE_SIZE = 50


@dataclass
class RestaurantConfig:
    opening_hours: Any
    total_capacity: int
    timezone: Optional[str] = None


def fetch_reservations(
    db: Session,
    restaurant_id: UUID,
    utc_start: datetime,
    utc_end: datetime,
    exclude_cancelled: bool = True,
    statuses: Optional[tuple[str, ...]] = None,
    end_inclusive: bool = True
) -> list[Reservation]:
    """
    Reservierungen eines Restaurants im UTC-Zeitraum, aufsteigend nach Zeit.
    Fehler der DB werden nicht abgefangen, das entscheidet der Aufrufer.
    """
    query = db.query(Reservation).filter(
        Reservation.restaurant_id == restaurant_id,
        Reservation.datetime_utc >= utc_start,
    )
    if end_inclusive:
        query = query.filter(Reservation.datetime_utc <= utc_end)
    else:
        query = query.filter(Reservation.datetime_utc < utc_end)

    if exclude_cancelled:
        query = query.filter(Reservation.status != ReservationStatus.CANCELLED.value)
    if statuses:
        query = query.filter(Reservation.status.in_(statuses))

    return query.order_by(Reservation.datetime_utc.asc()).all()


def fetch_restaurant_config(db: Session, restaurant_id: UUID) -> Optional[RestaurantConfig]:
    restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
    if not restaurant:
        return None
    return RestaurantConfig(
        opening_hours=restaurant.opening_hours,
        total_capacity=restaurant.total_capacity or settings.default_total_capacity,
        timezone=restaurant.timezone,
    )


# ============ LISTE & ÜBERSICHT ============

def encode_cursor(reservation: Reservation) -> str:
    """Cursor = Zeitpunkt + ID der letzten Zeile, gleiche Zeitpunkte bleiben eindeutig."""
    return f"{as_utc(reservation.datetime_utc).isoformat()}|{reservation.id}"


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    try:
        timestamp, reservation_id = cursor.split("|", 1)
        return as_utc(datetime.fromisoformat(timestamp)), UUID(reservation_id)
    except ValueError:
        raise ValueError(f"Ungültiger Cursor: {cursor}") from None


def list_reservations(
    db: Session,
    tenant_id: UUID,
    restaurant_ids: Optional[list[UUID]] = None,
    q: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: Optional[str] = None
) -> tuple[list[Reservation], Optional[str]]:
    """
    Reservierungen des Tenants, neueste zuerst.
    Pagination über (datetime_utc, id): nächste Seite mit dem zurückgegebenen Cursor.
    ValueError bei kaputtem Cursor.
    """
    query = db.query(Reservation).filter(Reservation.tenant_id == tenant_id)

    if restaurant_ids is not None:
        query = query.filter(Reservation.restaurant_id.in_(restaurant_ids))
    if status and status != "all":
        query = query.filter(Reservation.status == status)
    if date_from:
        query = query.filter(Reservation.datetime_utc >= as_utc(date_from))
    if date_to:
        query = query.filter(Reservation.datetime_utc <= as_utc(date_to))
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            Reservation.name.ilike(pattern),
            Reservation.phone.ilike(pattern),
            Reservation.notes.ilike(pattern),
            Reservation.locator.ilike(pattern),
        ))
    if cursor:
        last_time, last_id = decode_cursor(cursor)
        query = query.filter(or_(
            Reservation.datetime_utc < last_time,
            and_(Reservation.datetime_utc == last_time, Reservation.id < last_id),
        ))

    rows = query.order_by(Reservation.datetime_utc.desc(), Reservation.id.desc()).limit(limit).all()
    next_cursor = encode_cursor(rows[-1]) if len(rows) == limit else None
    return rows, next_cursor


def reservation_summary(
    db: Session,
    tenant_id: UUID,
    tz: ZoneInfo,
    restaurant_ids: Optional[list[UUID]] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Zähler fürs Dashboard: heute, morgen, Rest der Woche (ab übermorgen bis Montag),
    Rest des Monats (ab übermorgen). Stornierte zählen nicht.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    today = local_date(now, tz)

    def midnight(offset_days: int) -> datetime:
        return local_midnight_utc(today + timedelta(days=offset_days), tz)

    start_today = midnight(0)
    start_tomorrow = midnight(1)
    start_day_after = midnight(2)

    days_until_monday = 7 - today.weekday()
    start_next_monday = midnight(days_until_monday)

    first_next_month = (today.replace(day=28) + 4 * ONE_DAY).replace(day=1)
    start_next_month = midnight((first_next_month - today).days)

    def count(start: datetime, end: datetime) -> int:
        query = db.query(Reservation).filter(
            Reservation.tenant_id == tenant_id,
            Reservation.status != ReservationStatus.CANCELLED.value,
            Reservation.datetime_utc >= start,
            Reservation.datetime_utc < end,
        )
        if restaurant_ids is not None:
            query = query.filter(Reservation.restaurant_id.in_(restaurant_ids))
        return query.count()

    return {
        "today": count(start_today, start_tomorrow),
        "tomorrow": count(start_tomorrow, start_day_after),
        "week_rest": count(start_day_after, start_next_monday) if start_next_monday > start_day_after else 0,
        "month_rest": count(start_day_after, start_next_month) if start_next_month > start_day_after else 0,
    }
