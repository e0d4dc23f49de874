import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from app.schemas.opening_hours import OpeningHoursConfig, load_opening_hours

logger = logging.getLogger("app.services.turn_service")

DEFAULT_TURN_CAPACITY = 50
DAYS_PER_WEEK = 7


@dataclass
class Turn:
    """Service-Turn (z.B. Comida, Cena) mit vollen Stunden [start_hour, end_hour)."""
    name: str
    start_hour: int
    end_hour: int
    capacity: int
    days_active: int = DAYS_PER_WEEK

    def contains_hour(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


def fallback_turns() -> list[Turn]:
    return [
        Turn(name="Comida", start_hour=12, end_hour=16, capacity=50),
        Turn(name="Cena", start_hour=19, end_hour=23, capacity=60),
    ]


def _as_config(opening_hours: Any) -> Optional[OpeningHoursConfig]:
    if isinstance(opening_hours, OpeningHoursConfig):
        return opening_hours
    return load_opening_hours(opening_hours)


def extract_turns(opening_hours: Any) -> list[Turn]:
    """
    Baut aus dem Wochenplan eine eindeutige, nach Startstunde sortierte Turn-Liste.

    - Schlüssel ist der Schichtname, das erste Vorkommen (Montag -> Sonntag)
      legt Start, Ende und Kapazität fest
    - Start wird abgerundet, Ende aufgerundet (13:30-16:15 -> 13-17)
    - days_active = an wie vielen Wochentagen die Schicht vorkommt
    - ohne verwertbare Schichten: Fallback Comida/Cena
    """
    config = _as_config(opening_hours)
    if config is None:
        return fallback_turns()

    turns: dict[str, Turn] = {}
    days_active: dict[str, int] = {}

    for day_name, schedule in config.iter_days():
        if not schedule.enabled or not schedule.shifts:
            continue

        seen_today = set()
        for shift in schedule.shifts:
            if not shift.is_complete:
                logger.debug(f"Unvollständige Schicht am {day_name} übersprungen: {shift.name!r}")
                continue

            if shift.name not in turns:
                turns[shift.name] = Turn(
                    name=shift.name,
                    start_hour=math.floor(shift.start_decimal),
                    end_hour=math.ceil(shift.end_decimal),
                    capacity=shift.max_covers or DEFAULT_TURN_CAPACITY,
                )

            if shift.name not in seen_today:
                days_active[shift.name] = days_active.get(shift.name, 0) + 1
                seen_today.add(shift.name)

    if not turns:
        return fallback_turns()

    for name, turn in turns.items():
        turn.days_active = days_active.get(name) or DAYS_PER_WEEK

    return sorted(turns.values(), key=lambda t: t.start_hour)


def find_turn_for_hour(hour: int, turns: list[Turn]) -> Optional[Turn]:
    """Erster Turn (aufsteigend nach Start), dessen Intervall die Stunde enthält."""
    for turn in turns:
        if turn.contains_hour(hour):
            return turn
    return None
