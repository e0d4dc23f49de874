import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.models.reservation import Reservation, ReservationStatus
from app.schemas.opening_hours import OpeningHoursUpdate, SpecialDay, WEEKDAYS
from app.services.time_buckets import as_utc, start_of_local_day

logger = logging.getLogger("app.services.hours_validation_service")

MAX_LISTED_CONFLICTS = 5


def time_to_minutes(value: str) -> int:
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def is_time_between(value: str, start: str, end: str) -> bool:
    """
    Inklusive Grenzen. Bereiche über Mitternacht (23:00-02:00) werden unterstützt.
    """
    minutes = time_to_minutes(value)
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)

    if end_minutes < start_minutes:
        end_minutes += 24 * 60
        if minutes < start_minutes:
            minutes += 24 * 60

    return start_minutes <= minutes <= end_minutes


def is_time_in_ranges(value: str, ranges: str) -> bool:
    """ranges im Format 'HH:MM-HH:MM,HH:MM-HH:MM'"""
    for part in ranges.split(","):
        if "-" not in part:
            continue
        start, end = part.split("-", 1)
        if start.strip() and end.strip() and is_time_between(value, start, end):
            return True
    return False


def find_conflicts(
    reservations: list,
    opening_hours: OpeningHoursUpdate,
    special_days: list[SpecialDay],
    tz: ZoneInfo
) -> list[str]:
    """
    Prüft, welche Reservierungen mit dem neuen Wochenplan (und Sondertagen)
    außerhalb der Öffnungszeiten lägen. Gibt lesbare Konfliktmeldungen zurück.
    """
    special_by_date = {day.date: day for day in special_days}
    conflicts = []

    for r in reservations:
        local = as_utc(r.datetime_utc).astimezone(tz)
        date_str = local.date().isoformat()
        time_str = local.strftime("%H:%M")
        day_name = WEEKDAYS[local.weekday()]

        special = special_by_date.get(date_str)
        if special:
            if special.type == "closed":
                conflicts.append(f"{date_str}: Reservierung um {time_str}, aber geschlossen ({special.name})")
                continue
            if special.type == "special_hours" and special.hours:
                if not is_time_in_ranges(time_str, special.hours):
                    conflicts.append(
                        f"{date_str}: Reservierung um {time_str} außerhalb der Sonderzeiten ({special.name}: {special.hours})"
                    )
                continue

        schedule = opening_hours.opening_hours.get(day_name)
        if schedule is None or not schedule.enabled or not schedule.shifts:
            conflicts.append(f"{date_str} ({day_name}): Reservierung um {time_str}, aber geschlossen")
            continue

        if not any(is_time_between(time_str, s.start_time, s.end_time) for s in schedule.shifts):
            shifts_text = ", ".join(f"{s.start_time}-{s.end_time}" for s in schedule.shifts)
            conflicts.append(f"{date_str} ({day_name}): Reservierung um {time_str} außerhalb der Schichten ({shifts_text})")

    return conflicts


def conflict_message(conflicts: list[str]) -> str:
    message = f"{len(conflicts)} Reservierung(en) stehen im Konflikt:\n\n"
    message += "\n".join(conflicts[:MAX_LISTED_CONFLICTS])
    if len(conflicts) > MAX_LISTED_CONFLICTS:
        message += f"\n... und {len(conflicts) - MAX_LISTED_CONFLICTS} weitere"
    return message


def validate_hours(
    db: Session,
    restaurant_id: UUID,
    opening_hours: OpeningHoursUpdate,
    special_days: list[SpecialDay],
    tz: ZoneInfo,
    now: Optional[datetime] = None
) -> dict:
    """Zukünftige Reservierungen (ab heute 00:00 lokal) gegen neue Öffnungszeiten prüfen."""
    since = start_of_local_day(now or datetime.now(timezone.utc), tz)

    reservations = db.query(Reservation).filter(
        Reservation.restaurant_id == restaurant_id,
        Reservation.datetime_utc >= since,
        Reservation.status != ReservationStatus.CANCELLED.value,
    ).order_by(Reservation.datetime_utc.asc()).all()

    conflicts = find_conflicts(reservations, opening_hours, special_days, tz)
    if not conflicts:
        return {"has_conflicts": False, "conflicts": [], "message": None}

    logger.info(f"Öffnungszeiten für {restaurant_id}: {len(conflicts)} Konflikte")
    return {"has_conflicts": True, "conflicts": conflicts, "message": conflict_message(conflicts)}
