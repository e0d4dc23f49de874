import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger("app.schemas.opening_hours")

# Reihenfolge Montag -> Sonntag, so wie die Einstellungen gespeichert werden
WEEKDAYS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]

WEEKDAY_ALIASES = {
    "Monday": "Lunes",
    "Tuesday": "Martes",
    "Wednesday": "Miércoles",
    "Thursday": "Jueves",
    "Friday": "Viernes",
    "Saturday": "Sábado",
    "Sunday": "Domingo",
}

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_decimal(value: Optional[str]) -> Optional[float]:
    """'HH:MM' -> Dezimalstunden (13:30 -> 13.5). None wenn nicht lesbar."""
    if not isinstance(value, str):
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59:
        return None
    return hours + minutes / 60


def weekday_name(index: int) -> str:
    """Python-Wochentag (0 = Montag) -> gespeicherter Tagesname"""
    return WEEKDAYS[index]


class ShiftConfig(BaseModel):
    """Schicht wie gespeichert. Fehlende Felder sind erlaubt, der Turn-Parser überspringt sie."""
    id: Optional[str] = None
    name: Optional[str] = None
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    max_covers: Optional[int] = Field(default=None, alias="maxCovers")
    max_party_size: Optional[int] = Field(default=None, alias="maxPartySize")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("max_covers", "max_party_size", mode="before")
    @classmethod
    def _drop_invalid_numbers(cls, value):
        # "" oder Müll aus dem Formular wie "nicht gesetzt" behandeln
        try:
            return int(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            return None

    @property
    def start_decimal(self) -> Optional[float]:
        return parse_time_decimal(self.start_time)

    @property
    def end_decimal(self) -> Optional[float]:
        return parse_time_decimal(self.end_time)

    @property
    def is_complete(self) -> bool:
        return bool(self.name) and self.start_decimal is not None and self.end_decimal is not None


class DaySchedule(BaseModel):
    enabled: bool = False
    shifts: list[ShiftConfig] = []

    model_config = ConfigDict(extra="ignore")

    @field_validator("shifts", mode="before")
    @classmethod
    def _only_dict_shifts(cls, value):
        if not isinstance(value, list):
            raise ValueError("shifts muss eine Liste sein")
        return [shift for shift in value if isinstance(shift, dict) or isinstance(shift, ShiftConfig)]


class OpeningHoursConfig(BaseModel):
    """Wochenplan, Schlüssel sind die kanonischen Tagesnamen (WEEKDAYS)."""
    days: dict[str, DaySchedule] = {}

    def day(self, name: str) -> Optional[DaySchedule]:
        return self.days.get(name)

    def iter_days(self):
        """Liefert (Tagesname, DaySchedule) in fester Reihenfolge Montag -> Sonntag."""
        for name in WEEKDAYS:
            schedule = self.days.get(name)
            if schedule is not None:
                yield name, schedule


def load_opening_hours(raw: Any) -> Optional[OpeningHoursConfig]:
    """
    Liest das gespeicherte Öffnungszeiten-JSON tolerant ein.
    Kaputte Tage werden verworfen statt den ganzen Plan abzulehnen.
    Gibt None zurück, wenn raw kein Mapping ist.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"Öffnungszeiten ignoriert: erwartet Objekt, bekommen {type(raw).__name__}")
        return None

    days: dict[str, DaySchedule] = {}
    for key, value in raw.items():
        name = WEEKDAY_ALIASES.get(key, key)
        if name not in WEEKDAYS or name in days:
            continue
        try:
            days[name] = DaySchedule.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Öffnungszeiten für {key} ungültig, Tag wird übersprungen: {e.error_count()} Fehler")

    return OpeningHoursConfig(days=days)


# ============ STRIKTE MODELLE FÜR DAS SPEICHERN ============

class ShiftIn(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    start_time: str = Field(alias="startTime", pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(alias="endTime", pattern=r"^\d{2}:\d{2}$")
    max_covers: Optional[int] = Field(default=None, alias="maxCovers", ge=1)
    max_party_size: Optional[int] = Field(default=None, alias="maxPartySize", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _check_times(self):
        start = parse_time_decimal(self.start_time)
        end = parse_time_decimal(self.end_time)
        if start is None or end is None:
            raise ValueError("Zeit muss im Format HH:MM sein")
        # Schichten über Mitternacht werden nicht unterstützt
        if end <= start:
            raise ValueError(f"Schicht '{self.name}' endet vor oder mit ihrem Beginn")
        return self


class DayScheduleIn(BaseModel):
    enabled: bool
    shifts: list[ShiftIn] = []


class OpeningHoursUpdate(BaseModel):
    """Kompletter Wochenplan, Schlüssel Lunes..Domingo (oder Monday..Sunday)."""
    opening_hours: dict[str, DayScheduleIn]

    @field_validator("opening_hours")
    @classmethod
    def _known_days(cls, value: dict[str, DayScheduleIn]):
        normalized = {}
        for key, schedule in value.items():
            name = WEEKDAY_ALIASES.get(key, key)
            if name not in WEEKDAYS:
                raise ValueError(f"Unbekannter Wochentag: {key}")
            if name in normalized:
                raise ValueError(f"Wochentag doppelt: {key}")
            normalized[name] = schedule
        return normalized

    def to_storage(self) -> dict:
        """JSON in dem Format, das auch die Einstellungsseite speichert"""
        return {
            day: schedule.model_dump(by_alias=True, exclude_none=True)
            for day, schedule in self.opening_hours.items()
        }


class SpecialDay(BaseModel):
    id: Optional[str] = None
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    name: str = ""
    type: str = Field(pattern=r"^(closed|special_hours)$")
    hours: Optional[str] = None
