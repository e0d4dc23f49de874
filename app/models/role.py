from sqlalchemy import Column, String
from sqlalchemy import Uuid
import uuid

from app.database import Base

# Owner/Admin sehen alle Restaurants des Tenants, Manager/Staff nur zugewiesene
ROLE_OWNER = "Owner"
ROLE_ADMIN = "Admin"
ROLE_MANAGER = "Manager"
ROLE_STAFF = "Staff"

TENANT_WIDE_ROLES = (ROLE_OWNER, ROLE_ADMIN)


class Role(Base):
    __tablename__ = 'roles'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
