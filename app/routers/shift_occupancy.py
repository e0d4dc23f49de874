import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import User
from app.schemas.analytics import ShiftOccupancyResponse
from app.services.reservation_service import RestaurantConfig
from app.services.shift_occupancy_service import get_shift_occupancy
from app.config import settings
from app.utils.security import get_current_user, get_accessible_restaurant

logger = logging.getLogger("app.routers.shift_occupancy")

router = APIRouter(prefix="/shift-occupancy", tags=["shift-occupancy"])


@router.get("", response_model=ShiftOccupancyResponse, response_model_exclude_none=True)
def shift_occupancy(
    restaurant_id: Optional[UUID] = Query(default=None),
    datetime_utc: Optional[datetime] = Query(default=None),
    local_time: Optional[str] = Query(default=None, pattern=r"^\d{2}:\d{2}$"),
    local_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Aktuelle Belegung der Schicht, in die datetime_utc fällt.
    local_time (HH:MM) + local_date (YYYY-MM-DD) machen die Zuordnung exakt,
    ohne sie wird die UTC-Uhrzeit gegen die Schichtzeiten verglichen.
    """
    if not restaurant_id or not datetime_utc:
        raise HTTPException(status_code=400, detail="Parameter restaurant_id oder datetime_utc fehlt")

    restaurant = get_accessible_restaurant(db, current_user, restaurant_id)
    config = None
    if restaurant:
        config = RestaurantConfig(
            opening_hours=restaurant.opening_hours,
            total_capacity=restaurant.total_capacity or settings.default_total_capacity,
            timezone=restaurant.timezone,
        )

    try:
        return get_shift_occupancy(db, config, restaurant_id, datetime_utc, local_time, local_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Fehler beim Laden der Reservierungen für Schicht-Auslastung: {e}")
        raise HTTPException(status_code=500, detail="Fehler beim Laden der Reservierungen")
