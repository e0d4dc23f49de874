from sqlalchemy import Column, String, Boolean, ForeignKey, Table
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship

import uuid

from app.database import Base


# Zuordnung User <-> Restaurant (nur relevant für Manager/Staff)
user_restaurants = Table(
    "user_restaurants",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id"), primary_key=True),
    Column("restaurant_id", Uuid, ForeignKey("restaurants.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    tenant = relationship("Tenant")
    role_id = Column(Uuid, ForeignKey("roles.id"))
    role = relationship("Role")
    restaurants = relationship("Restaurant", secondary=user_restaurants)
    is_active = Column(Boolean, nullable=False, default=True)
