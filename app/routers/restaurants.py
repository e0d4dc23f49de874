import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import User, Restaurant
from app.models.role import ROLE_OWNER, ROLE_ADMIN
from app.schemas.opening_hours import OpeningHoursUpdate
from app.schemas.restaurant import RestaurantResponse, ValidateHoursRequest, ValidateHoursResponse
from app.services.hours_validation_service import validate_hours
from app.services.time_buckets import get_timezone
from app.utils.security import get_current_user, require_role, accessible_restaurant_ids, get_accessible_restaurant

logger = logging.getLogger("app.routers.restaurants")

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


def _get_restaurant(db: Session, user: User, id: UUID) -> Restaurant:
    restaurant = get_accessible_restaurant(db, user, id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant nicht gefunden")
    return restaurant


@router.get("", response_model=list[RestaurantResponse])
def get_restaurants(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ids = accessible_restaurant_ids(db, current_user)
    if not ids:
        return []
    return db.query(Restaurant).filter(Restaurant.id.in_(ids)).order_by(Restaurant.name).all()


@router.get("/{id}", response_model=RestaurantResponse)
def get_restaurant(
    id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _get_restaurant(db, current_user, id)


# Öffnungszeiten komplett ersetzen
@router.put("/{id}/opening-hours", response_model=RestaurantResponse)
@require_role([ROLE_OWNER, ROLE_ADMIN])
def update_opening_hours(
    id: UUID,
    data: OpeningHoursUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    restaurant = _get_restaurant(db, current_user, id)

    restaurant.opening_hours = data.to_storage()
    db.commit()
    db.refresh(restaurant)

    logger.info(f"Öffnungszeiten von {restaurant.name} geändert durch {current_user.email}")
    return restaurant


@router.post("/{id}/validate-hours", response_model=ValidateHoursResponse)
def validate_opening_hours(
    id: UUID,
    data: ValidateHoursRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Prüft vor dem Speichern, ob zukünftige Reservierungen außerhalb
    der neuen Öffnungszeiten oder auf geschlossenen Sondertagen liegen.
    """
    restaurant = _get_restaurant(db, current_user, id)
    tz = get_timezone(restaurant.timezone)
    return validate_hours(db, restaurant.id, data, data.special_days, tz)
