import uuid
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, Boolean, Text, ForeignKey, Index
from sqlalchemy import Uuid

from app.database import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    RECONFIRMED = "reconfirmed"
    ARRIVED = "arrived"
    SEATED = "seated"
    FINISHED = "finished"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


# Status, die bei der Schicht-Auslastung als belegte Plätze zählen
ACTIVE_STATUSES = (
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.RECONFIRMED.value,
    ReservationStatus.ARRIVED.value,
    ReservationStatus.SEATED.value,
    ReservationStatus.PENDING.value,
)


class Reservation(Base):
    """
    Einzelne Reservierung. datetime_utc ist immer UTC.
    Status ist ein String, Bot und Web-Formular liefern auch eigene Werte.
    """
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    restaurant_id = Column(Uuid, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(150), nullable=False, default="")
    phone = Column(String(50), nullable=True)
    source = Column(String(50), nullable=True)
    status = Column(String(30), nullable=False, default=ReservationStatus.CONFIRMED.value)
    party_size = Column(Integer, nullable=True)
    datetime_utc = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)
    locator = Column(String(50), nullable=True)
    reminder_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_reservations_restaurant_datetime", "restaurant_id", "datetime_utc"),
    )
