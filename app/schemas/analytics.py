from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Report-Dokumente gehen in camelCase an das Dashboard"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Trends(CamelModel):
    reservations: float = 0
    guests: float = 0
    avg_party_size: float = 0
    occupancy_rate: float = 0


class DayEntry(CamelModel):
    date: str
    count: int
    guests: int


class HourEntry(CamelModel):
    hour: int
    count: int
    guests: int


class TurnEntry(CamelModel):
    turn: str
    count: int
    guests: int
    capacity: int


class SourceEntry(CamelModel):
    source: str
    count: int
    percentage: int


class RealTimeOccupancyEntry(CamelModel):
    turn: str
    current_guests: int
    max_capacity: int
    percentage: float
    # confirmed, pending, seated, finished, no_show (+ weitere Status falls vorhanden)
    status_breakdown: dict[str, int]


class AnalyticsResponse(CamelModel):
    total_reservations: int = 0
    total_guests: int = 0
    avg_party_size: float = 0
    occupancy_rate: float = 0
    trends: Trends = Trends()
    reservations_by_day: list[DayEntry] = []
    reservations_by_time: list[HourEntry] = []
    reservations_by_turn: list[TurnEntry] = []
    reservations_by_sources: list[SourceEntry] = []
    real_time_occupancy: list[RealTimeOccupancyEntry] = []


# ============ SCHICHT-AUSLASTUNG ============

class ShiftInfo(CamelModel):
    name: str
    start_time: str
    end_time: str


class ShiftOccupancy(CamelModel):
    current_covers: int
    total_capacity: int
    bot_max_covers: int
    available_spots: int
    bot_available_spots: int
    utilization_percent: int


class ShiftOccupancyWindow(CamelModel):
    start_utc: str
    end_utc: str


class ShiftOccupancyResponse(CamelModel):
    found: bool
    message: Optional[str] = None
    total_capacity: Optional[int] = None
    shift: Optional[ShiftInfo] = None
    occupancy: Optional[ShiftOccupancy] = None
    window: Optional[ShiftOccupancyWindow] = None
