from sqlalchemy import Column, String, Boolean
from sqlalchemy import Uuid
import uuid

from app.database import Base

class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
