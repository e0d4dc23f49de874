from uuid import UUID
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from app.models.reservation import ReservationStatus


class ReservationResponse(BaseModel):
    id: UUID
    restaurant_id: UUID
    name: str
    phone: Optional[str] = None
    source: Optional[str] = None
    status: str
    party_size: Optional[int] = None
    datetime_utc: datetime
    notes: Optional[str] = None
    locator: Optional[str] = None
    reminder_sent: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ReservationListResponse(BaseModel):
    data: list[ReservationResponse]
    next_cursor: Optional[str] = None


class ReservationSummaryResponse(BaseModel):
    """Zähler fürs Dashboard"""
    today: int
    tomorrow: int
    week_rest: int
    month_rest: int


class ReservationCreate(BaseModel):
    restaurant_id: UUID
    name: str = Field(min_length=1, max_length=150)
    phone: Optional[str] = Field(default=None, max_length=50)
    party_size: int = Field(ge=1, le=100)
    datetime_utc: datetime
    notes: Optional[str] = None
    source: Optional[str] = Field(default=None, max_length=50)
    # manuelle Reservierungen sind direkt bestätigt
    status: ReservationStatus = ReservationStatus.CONFIRMED

    @field_validator('datetime_utc')
    @classmethod
    def must_have_timezone(cls, v: datetime):
        if v.tzinfo is None:
            raise ValueError('datetime_utc braucht eine Zeitzone (z.B. 2024-06-01T18:00:00Z)')
        return v.astimezone(timezone.utc)


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


class ReservationUpdate(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=50)
    party_size: Optional[int] = Field(default=None, ge=1, le=100)
    notes: Optional[str] = None
