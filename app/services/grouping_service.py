"""
Gruppierung von Reservierungen nach Tag, Stunde, Turn und Quelle.

Achtung Zeitbasis: Tag und Stunde werden über den UTC-Zeitstempel gebildet,
Turns über die lokale Stunde des Restaurants (Turns sind lokale Uhrzeiten).
Bestehende Reports hängen an dieser Aufteilung.
"""
from collections import Counter
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo

from app.services.time_buckets import as_utc, local_days_between
from app.services.turn_service import Turn, find_turn_for_hour
from app.services.percentage_service import largest_remainder_percentages
from app.utils.rounding import round_half_up

PHONE_SOURCE = "Phone"
PHONE_LABEL = "Teléfono"
OTHER_SOURCE = "Other"


def _guests(reservation) -> int:
    return reservation.party_size or 0


def group_by_day(reservations: Iterable, start: datetime, end: datetime, tz: ZoneInfo) -> list[dict]:
    """
    Ein Eintrag pro Kalendertag im Zeitraum (auch ohne Reservierungen),
    aufsteigend sortiert. Reservierungen zählen auf ihr UTC-Datum.
    """
    days: dict[str, dict] = {
        day.isoformat(): {"count": 0, "guests": 0}
        for day in local_days_between(start, end, tz)
    }

    for r in reservations:
        key = as_utc(r.datetime_utc).date().isoformat()
        # UTC-Datum kann am Rand außerhalb der lokalen Tage liegen
        bucket = days.setdefault(key, {"count": 0, "guests": 0})
        bucket["count"] += 1
        bucket["guests"] += _guests(r)

    return [
        {"date": day, "count": data["count"], "guests": data["guests"]}
        for day, data in sorted(days.items())
    ]


def group_by_hour(reservations: Iterable) -> list[dict]:
    """UTC-Stunde 0-23, nur Stunden mit mindestens einer Reservierung."""
    hours = {hour: {"count": 0, "guests": 0} for hour in range(24)}

    for r in reservations:
        bucket = hours[as_utc(r.datetime_utc).hour]
        bucket["count"] += 1
        bucket["guests"] += _guests(r)

    return [
        {"hour": hour, "count": data["count"], "guests": data["guests"]}
        for hour, data in hours.items()
        if data["count"] > 0
    ]


def accumulate_by_turn(reservations: Iterable, turns: list[Turn], tz: ZoneInfo) -> dict[str, dict]:
    """
    Summen pro Turn (noch keine Tagesdurchschnitte). Jeder Turn ist enthalten,
    Reservierungen ohne passenden Turn fallen raus.
    """
    totals = {
        turn.name: {"count": 0, "guests": 0, "capacity": turn.capacity, "days_active": turn.days_active}
        for turn in turns
    }

    for r in reservations:
        local_hour = as_utc(r.datetime_utc).astimezone(tz).hour
        turn = find_turn_for_hour(local_hour, turns)
        if turn is None:
            continue
        totals[turn.name]["count"] += 1
        totals[turn.name]["guests"] += _guests(r)

    return totals


def daily_turn_averages(totals: dict[str, dict], num_days: int) -> list[dict]:
    """Summen -> Durchschnitt pro Tag (kaufmännisch gerundet), Kapazität = ein Tag."""
    num_days = num_days if num_days > 0 else 1
    return [
        {
            "turn": name,
            "count": round_half_up(data["count"] / num_days),
            "guests": round_half_up(data["guests"] / num_days),
            "capacity": data["capacity"],
        }
        for name, data in totals.items()
    ]


def group_by_turn(reservations: Iterable, turns: list[Turn], num_days: int, tz: ZoneInfo) -> list[dict]:
    return daily_turn_averages(accumulate_by_turn(reservations, turns, tz), num_days)


def source_label(source) -> str:
    if not source:
        return OTHER_SOURCE
    if source == PHONE_SOURCE:
        return PHONE_LABEL
    return source


def group_by_source(reservations: Iterable) -> list[dict]:
    counts = Counter(source_label(r.source) for r in reservations)
    return [
        {"source": entry["label"], "count": entry["count"], "percentage": entry["percentage"]}
        for entry in largest_remainder_percentages(counts)
    ]
