import logging
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.models.reservation import ACTIVE_STATUSES
from app.schemas.analytics import ShiftOccupancyResponse
from app.schemas.opening_hours import load_opening_hours, parse_time_decimal, weekday_name
from app.services import occupancy_service
from app.services.reservation_service import RestaurantConfig, fetch_reservations
from app.services.time_buckets import as_utc

logger = logging.getLogger("app.services.shift_occupancy_service")


def get_shift_occupancy(
    db: Session,
    config: Optional[RestaurantConfig],
    restaurant_id: UUID,
    datetime_utc: datetime,
    local_time: Optional[str] = None,
    local_date: Optional[date] = None
) -> ShiftOccupancyResponse:
    """
    Belegung der Schicht, in die ein (geplanter) Reservierungszeitpunkt fällt.

    Mit local_time + local_date wird die Schicht über die lokale Uhrzeit gefunden
    und das UTC-Fenster über den Offset zwischen lokaler Zeit und datetime_utc
    berechnet. Ohne diese Angaben wird die UTC-Uhrzeit direkt gegen die
    Schichtzeiten verglichen (ungenau, nur als Fallback).
    """
    if config is None:
        return ShiftOccupancyResponse(
            found=False,
            message="Restaurant nicht gefunden",
            total_capacity=settings.default_total_capacity,
        )

    total_capacity = config.total_capacity
    utc = as_utc(datetime_utc)

    if local_time and local_date:
        time_decimal = parse_time_decimal(local_time)
        offset = occupancy_service.infer_utc_offset(local_time, utc)
        day = local_date
    else:
        logger.debug(f"Schicht-Auslastung ohne lokale Zeit für {restaurant_id}, nutze UTC")
        time_decimal = utc.hour + utc.minute / 60
        offset = timedelta(0)
        day = utc.date()

    opening_hours = load_opening_hours(config.opening_hours)
    shift = occupancy_service.find_shift(opening_hours, weekday_name(day.weekday()), time_decimal)

    if shift is None:
        return ShiftOccupancyResponse(
            found=False,
            message="Keine Schicht zu diesem Zeitpunkt gefunden",
            total_capacity=total_capacity,
        )

    window_start, window_end = occupancy_service.shift_window_utc(shift, day, offset)

    reservations = fetch_reservations(
        db,
        restaurant_id,
        window_start,
        window_end,
        statuses=ACTIVE_STATUSES,
        end_inclusive=False,
    )
    current_covers = sum(r.party_size or 0 for r in reservations)

    logger.info(f"Schicht {shift.name} am {day}: {current_covers} Gäste ({window_start.isoformat()} - {window_end.isoformat()})")

    return ShiftOccupancyResponse(
        found=True,
        total_capacity=total_capacity,
        shift={"name": shift.name, "start_time": shift.start_time, "end_time": shift.end_time},
        occupancy=occupancy_service.summarize_shift(current_covers, total_capacity, shift.max_covers),
        window={"start_utc": window_start.isoformat(), "end_utc": window_end.isoformat()},
    )
