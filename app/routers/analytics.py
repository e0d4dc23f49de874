import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models import User
from app.schemas.analytics import AnalyticsResponse
from app.services import analytics_service, export_service
from app.services.analytics_service import AnalyticsDataError
from app.utils.security import get_current_user, get_accessible_restaurant

logger = logging.getLogger("app.routers.analytics")

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _require_restaurant(db: Session, current_user: User, restaurant_id: Optional[UUID]):
    if not restaurant_id:
        raise HTTPException(status_code=400, detail="Parameter restaurant_id fehlt")
    restaurant = get_accessible_restaurant(db, current_user, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant nicht gefunden")
    return restaurant


def _build(db: Session, restaurant_id: UUID, period: str) -> AnalyticsResponse:
    try:
        return analytics_service.build_report(db, restaurant_id, period)
    except AnalyticsDataError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=AnalyticsResponse)
def get_analytics(
    restaurant_id: Optional[UUID] = Query(default=None),
    period: str = Query(default=settings.analytics_default_period),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Kennzahlen, Trends und Verteilungen für den Zeitraum.
    period: today, yesterday, this_week, this_month, 7d, 30d, 90d (sonst 7d)
    """
    _require_restaurant(db, current_user, restaurant_id)
    return _build(db, restaurant_id, period)


@router.get("/export")
def export_analytics(
    restaurant_id: Optional[UUID] = Query(default=None),
    period: str = Query(default=settings.analytics_default_period),
    format: str = Query(default="csv", pattern="^(csv|pdf)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    restaurant = _require_restaurant(db, current_user, restaurant_id)
    report = _build(db, restaurant_id, period)
    now = datetime.now(timezone.utc)

    filename = export_service.export_filename(period, format, now)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    logger.info(f"Analytics-Export ({format}) für {restaurant.name} durch {current_user.email}")

    if format == "pdf":
        content = export_service.analytics_to_pdf(report, restaurant.name, period, now)
        return Response(content=content, media_type="application/pdf", headers=headers)

    content = export_service.analytics_to_csv(report)
    return Response(content=content, media_type="text/csv; charset=utf-8", headers=headers)
