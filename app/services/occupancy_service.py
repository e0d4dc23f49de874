import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from app.models.reservation import ReservationStatus
from app.schemas.opening_hours import OpeningHoursConfig, ShiftConfig, parse_time_decimal
from app.services.time_buckets import as_utc
from app.services.turn_service import Turn, find_turn_for_hour
from app.utils.rounding import round_half_up

logger = logging.getLogger("app.services.occupancy_service")

BREAKDOWN_STATUSES = ("confirmed", "pending", "seated", "finished", "no_show")

MAX_OFFSET_MINUTES = 12 * 60
MINUTES_PER_DAY = 24 * 60


# ============ HISTORISCHE AUSLASTUNG ============

def occupancy_rate(turn_rows: list[dict], num_days: int) -> float:
    """
    Gäste der Turns / Tage / Tageskapazität in Prozent.
    turn_rows sind die Zeilen aus daily_turn_averages, die Gäste also schon
    Tagesdurchschnitte. Sie werden trotzdem noch einmal durch num_days geteilt,
    so rechnen die bestehenden Dashboards.
    """
    if not turn_rows:
        return 0.0
    num_days = num_days if num_days > 0 else 1
    daily_capacity = sum(t["capacity"] for t in turn_rows)
    if daily_capacity <= 0:
        return 0.0
    avg_daily_guests = sum(t["guests"] for t in turn_rows) / num_days
    return avg_daily_guests / daily_capacity * 100


# ============ ECHTZEIT (HEUTE) ============

def real_time_occupancy(reservations: Iterable, turns: list[Turn], tz: ZoneInfo) -> list[dict]:
    """
    Heutige Gäste pro Turn inkl. Aufteilung nach Status.
    Prozent ist nicht gedeckelt, > 100 heißt überbucht.
    """
    occupancy = {
        turn.name: {
            "current_guests": 0,
            "max_capacity": turn.capacity,
            "status_breakdown": {status: 0 for status in BREAKDOWN_STATUSES},
        }
        for turn in turns
    }

    for r in reservations:
        local_hour = as_utc(r.datetime_utc).astimezone(tz).hour
        turn = find_turn_for_hour(local_hour, turns)
        if turn is None:
            continue

        guests = r.party_size or 0
        status = r.status or ReservationStatus.CONFIRMED.value
        entry = occupancy[turn.name]
        entry["current_guests"] += guests
        entry["status_breakdown"][status] = entry["status_breakdown"].get(status, 0) + guests

    return [
        {
            "turn": name,
            "current_guests": data["current_guests"],
            "max_capacity": data["max_capacity"],
            "percentage": (data["current_guests"] / data["max_capacity"] * 100) if data["max_capacity"] > 0 else 0.0,
            "status_breakdown": data["status_breakdown"],
        }
        for name, data in occupancy.items()
    ]


# ============ SCHICHT-AUSLASTUNG (PUNKTABFRAGE) ============

def find_shift(config: Optional[OpeningHoursConfig], day_name: str, time_decimal: float) -> Optional[ShiftConfig]:
    """Erste Schicht des Tages mit start <= Zeit < ende."""
    if config is None:
        return None
    schedule = config.day(day_name)
    if schedule is None or not schedule.enabled:
        return None

    for shift in schedule.shifts:
        if not shift.is_complete:
            continue
        if shift.start_decimal <= time_decimal < shift.end_decimal:
            return shift
    return None


def infer_utc_offset(local_time: str, datetime_utc: datetime) -> timedelta:
    """
    Offset lokal - UTC aus der lokalen Uhrzeit und dem UTC-Zeitpunkt.
    Nur die Uhrzeit wird verglichen, Sprünge über Mitternacht werden
    auf +-12h zurückgefaltet (23:30 lokal / 22:30Z -> +1h, 00:30 lokal / 22:30Z -> +2h).
    """
    local_decimal = parse_time_decimal(local_time)
    if local_decimal is None:
        raise ValueError(f"Ungültige lokale Uhrzeit: {local_time!r}")

    utc = as_utc(datetime_utc)
    local_minutes = round(local_decimal * 60)
    utc_minutes = utc.hour * 60 + utc.minute
    diff = local_minutes - utc_minutes

    if diff > MAX_OFFSET_MINUTES:
        diff -= MINUTES_PER_DAY
    elif diff < -MAX_OFFSET_MINUTES:
        diff += MINUTES_PER_DAY

    return timedelta(minutes=diff)


def shift_window_utc(shift: ShiftConfig, day: date, offset: timedelta) -> tuple[datetime, datetime]:
    """Lokale Schichtzeiten an einem lokalen Datum -> UTC-Fenster [start, ende)."""
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    start = midnight + timedelta(hours=shift.start_decimal) - offset
    end = midnight + timedelta(hours=shift.end_decimal) - offset
    return start, end


def summarize_shift(current_covers: int, total_capacity: int, shift_max_covers: Optional[int]) -> dict:
    """
    total_capacity = Kapazität des Restaurants, bot_max_covers = Limit der Schicht
    (fällt auf total_capacity zurück). Der Bot rechnet mit dem weicheren Limit.
    """
    bot_max_covers = shift_max_covers or total_capacity
    return {
        "current_covers": current_covers,
        "total_capacity": total_capacity,
        "bot_max_covers": bot_max_covers,
        "available_spots": max(0, total_capacity - current_covers),
        "bot_available_spots": max(0, bot_max_covers - current_covers),
        "utilization_percent": round_half_up(current_covers / total_capacity * 100) if total_capacity > 0 else 0,
    }
