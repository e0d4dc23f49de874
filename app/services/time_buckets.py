"""
Zeitfenster für Analytics in der lokalen Zeitzone des Restaurants.

Alle Funktionen bekommen einen Zeitpunkt (beliebige Zeitzone) und liefern
UTC-Zeitpunkte zurück, so wie sie in der DB (datetime_utc) verglichen werden.
Der UTC-Offset wird pro Zeitpunkt über zoneinfo bestimmt, Sommer-/Winterzeit
ist damit abgedeckt.
"""
import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import settings

logger = logging.getLogger("app.services.time_buckets")

ONE_DAY = timedelta(days=1)
ONE_MS = timedelta(milliseconds=1)

PERIODS = ("today", "yesterday", "this_week", "this_month", "7d", "30d", "90d")
DEFAULT_PERIOD = "7d"

_ROLLING_DAYS = {"7d": 7, "30d": 30, "90d": 90}


def get_timezone(name: Optional[str] = None) -> ZoneInfo:
    """Zeitzone des Restaurants, Fallback auf settings.business_timezone."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unbekannte Zeitzone '{name}', nutze {settings.business_timezone}")
    return ZoneInfo(settings.business_timezone)


def as_utc(value: datetime) -> datetime:
    """Naive Werte (z.B. aus SQLite) gelten als UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(instant: datetime, tz: ZoneInfo) -> date:
    return as_utc(instant).astimezone(tz).date()


def local_midnight_utc(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def start_of_local_day(instant: datetime, tz: ZoneInfo) -> datetime:
    return local_midnight_utc(local_date(instant, tz), tz)


def end_of_local_day(instant: datetime, tz: ZoneInfo) -> datetime:
    # Beginn des nächsten lokalen Tages minus 1ms (23h/25h-Tage bei Zeitumstellung)
    next_day = local_date(instant, tz) + ONE_DAY
    return local_midnight_utc(next_day, tz) - ONE_MS


def start_of_local_week(instant: datetime, tz: ZoneInfo) -> datetime:
    day = local_date(instant, tz)
    monday = day - timedelta(days=day.weekday())
    return local_midnight_utc(monday, tz)


def start_of_local_month(instant: datetime, tz: ZoneInfo) -> datetime:
    day = local_date(instant, tz)
    return local_midnight_utc(day.replace(day=1), tz)


def resolve_period(period: Optional[str], tz: ZoneInfo, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """
    Zeitraum-Kürzel -> (start_utc, end_utc), beide inklusive.
    Unbekannte Kürzel fallen auf 7d zurück.
    Rollierende Zeiträume (7d/30d/90d) beginnen N lokale Tage vor heute
    und enden mit dem heutigen Tag.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    today = local_date(now, tz)
    end = end_of_local_day(now, tz)

    if period == "today":
        return local_midnight_utc(today, tz), end
    if period == "yesterday":
        yesterday = today - ONE_DAY
        return local_midnight_utc(yesterday, tz), local_midnight_utc(today, tz) - ONE_MS
    if period == "this_week":
        return start_of_local_week(now, tz), end
    if period == "this_month":
        return start_of_local_month(now, tz), end

    if period not in _ROLLING_DAYS:
        if period:
            logger.debug(f"Unbekannter Zeitraum '{period}', nutze {DEFAULT_PERIOD}")
        period = DEFAULT_PERIOD

    start_day = today - timedelta(days=_ROLLING_DAYS[period])
    return local_midnight_utc(start_day, tz), end


def period_days(start: datetime, end: datetime, tz: Optional[ZoneInfo] = None) -> int:
    """
    Anzahl Tage im Zeitraum, ceil((end - start) / 1 Tag). 'today' -> 1
    Mit tz werden lokale Kalendertage gezählt, sonst würde ein 25h-Tag
    bei der Zeitumstellung einen Tag zu viel ergeben.
    """
    if tz is not None:
        return (local_date(end, tz) - local_date(start, tz)).days + 1
    return math.ceil((end - start) / ONE_DAY)


def previous_period(start: datetime, days: int, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """
    Gleich langer Zeitraum direkt davor: endet am lokalen Tag vor 'start'.
    """
    first_day = local_date(start, tz)
    prev_end = local_midnight_utc(first_day, tz) - ONE_MS
    prev_start = local_midnight_utc(first_day - timedelta(days=days), tz)
    return prev_start, prev_end


def local_days_between(start: datetime, end: datetime, tz: ZoneInfo) -> list[date]:
    """Alle lokalen Kalendertage von start bis end (inklusive)."""
    first = local_date(start, tz)
    last = local_date(end, tz)
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += ONE_DAY
    return days
