from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, JSON
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
import uuid

from app.database import Base


class Restaurant(Base):
    """
    Restaurant eines Tenants inkl. Öffnungszeiten.
    opening_hours ist das rohe JSON aus den Einstellungen:
    {"Lunes": {"enabled": true, "shifts": [{"name": "Comida", "startTime": "13:00", ...}]}, ...}
    """
    __tablename__ = "restaurants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    tenant = relationship("Tenant")
    name = Column(String(150), nullable=False)
    timezone = Column(String(64), nullable=True)
    opening_hours = Column(JSON, nullable=True)
    total_capacity = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
