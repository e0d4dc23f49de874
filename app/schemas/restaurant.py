from uuid import UUID
from typing import Any, Optional
from pydantic import BaseModel

from app.schemas.opening_hours import OpeningHoursUpdate, SpecialDay


class RestaurantResponse(BaseModel):
    id: UUID
    name: str
    timezone: Optional[str] = None
    total_capacity: Optional[int] = None
    opening_hours: Optional[Any] = None

    model_config = {"from_attributes": True}


class ValidateHoursRequest(OpeningHoursUpdate):
    special_days: list[SpecialDay] = []


class ValidateHoursResponse(BaseModel):
    has_conflicts: bool
    conflicts: list[str] = []
    message: Optional[str] = None
