"""
Analytics-Report für ein Restaurant.

Ablauf:
1. Zeitraum + Vergleichszeitraum bestimmen
2. Reservierungen (aktuell, vorher) und Restaurant-Konfiguration laden
3. KPIs und Trends berechnen
4. Gruppieren nach Tag, Stunde, Turn, Quelle + Echtzeit-Auslastung für heute
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.schemas.analytics import AnalyticsResponse
from app.services import grouping_service, occupancy_service, time_buckets
from app.services.reservation_service import RestaurantConfig, fetch_reservations, fetch_restaurant_config
from app.services.turn_service import extract_turns

logger = logging.getLogger("app.services.analytics_service")

T = TypeVar("T")


class AnalyticsDataError(Exception):
    """Primäre Reservierungsabfrage fehlgeschlagen, kein Report möglich."""


def percent_change(current: float, previous: float) -> float:
    """(aktuell - vorher) / vorher * 100, 0 wenn es vorher nichts gab"""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def _totals(reservations: list) -> tuple[int, int, float]:
    count = len(reservations)
    guests = sum(r.party_size or 0 for r in reservations)
    avg = guests / count if count > 0 else 0.0
    return count, guests, avg


def _optional(db: Session, label: str, loader: Callable[[], T], default: T) -> T:
    """Nebenabfragen: Fehler loggen, Session zurückrollen, Default liefern"""
    try:
        return loader()
    except SQLAlchemyError as e:
        logger.warning(f"{label} konnte nicht geladen werden, nutze Default: {e}")
        db.rollback()
        return default


def empty_analytics() -> AnalyticsResponse:
    return AnalyticsResponse()


def build_report(
    db: Session,
    restaurant_id: UUID,
    period: Optional[str] = None,
    now: Optional[datetime] = None
) -> AnalyticsResponse:
    now = now or datetime.now(timezone.utc)

    config: Optional[RestaurantConfig] = _optional(
        db, "Restaurant-Konfiguration", lambda: fetch_restaurant_config(db, restaurant_id), None
    )
    tz = time_buckets.get_timezone(config.timezone if config else None)

    start, end = time_buckets.resolve_period(period, tz, now)
    num_days = time_buckets.period_days(start, end, tz)
    prev_start, prev_end = time_buckets.previous_period(start, num_days, tz)

    logger.info(f"Analytics für {restaurant_id}, Zeitraum {period}: {start.isoformat()} bis {end.isoformat()}")

    try:
        reservations = fetch_reservations(db, restaurant_id, start, end)
    except SQLAlchemyError as e:
        logger.error(f"Fehler beim Laden der Reservierungen für {restaurant_id}: {e}")
        db.rollback()
        raise AnalyticsDataError("Fehler beim Laden der Reservierungen") from e

    previous = _optional(
        db, "Vergleichszeitraum", lambda: fetch_reservations(db, restaurant_id, prev_start, prev_end), []
    )

    logger.info(f"{len(reservations)} Reservierungen gefunden ({len(previous)} im Vergleichszeitraum)")

    if not reservations:
        return empty_analytics()

    total_reservations, total_guests, avg_party_size = _totals(reservations)
    prev_reservations, prev_guests, prev_avg_party_size = _totals(previous)

    opening_hours = config.opening_hours if config else None
    turns = extract_turns(opening_hours)

    turn_rows = grouping_service.group_by_turn(reservations, turns, num_days, tz)
    occupancy_rate = occupancy_service.occupancy_rate(turn_rows, num_days)

    prev_turn_rows = grouping_service.group_by_turn(previous, turns, num_days, tz)
    prev_occupancy_rate = occupancy_service.occupancy_rate(prev_turn_rows, num_days)

    today_start = time_buckets.start_of_local_day(now, tz)
    today_end = time_buckets.end_of_local_day(now, tz)
    today_reservations = _optional(
        db, "Reservierungen von heute", lambda: fetch_reservations(db, restaurant_id, today_start, today_end), []
    )

    return AnalyticsResponse(
        total_reservations=total_reservations,
        total_guests=total_guests,
        avg_party_size=avg_party_size,
        occupancy_rate=occupancy_rate,
        trends={
            "reservations": percent_change(total_reservations, prev_reservations),
            "guests": percent_change(total_guests, prev_guests),
            "avg_party_size": percent_change(avg_party_size, prev_avg_party_size),
            "occupancy_rate": percent_change(occupancy_rate, prev_occupancy_rate),
        },
        reservations_by_day=grouping_service.group_by_day(reservations, start, end, tz),
        reservations_by_time=grouping_service.group_by_hour(reservations),
        reservations_by_turn=turn_rows,
        reservations_by_sources=grouping_service.group_by_source(reservations),
        real_time_occupancy=occupancy_service.real_time_occupancy(today_reservations, turns, tz),
    )
