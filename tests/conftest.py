"""
Pytest Fixtures für das Reservierungsportal.

Fixtures sind wiederverwendbare Setup-Funktionen für Tests.
Sie werden automatisch von pytest erkannt und injiziert.
"""
import os
import tempfile

# Settings werden beim Import gelesen, daher vor allen app-Imports setzen
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-nur-fuer-tests")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "reservierungsportal-test-logs"))

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models import Tenant, Role, Restaurant, User, Reservation
from app.utils.security import hash_password


# ============ DATENBANK SETUP ============

# SQLite In-Memory, StaticPool damit alle Sessions dieselbe Verbindung nutzen
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


OPENING_HOURS = {
    day: {
        "enabled": True,
        "shifts": [
            {"id": "1", "name": "Comida", "startTime": "13:00", "endTime": "16:00", "maxCovers": 40},
            {"id": "2", "name": "Cena", "startTime": "20:00", "endTime": "23:00", "maxCovers": 60},
        ]
    }
    for day in ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado"]
}
OPENING_HOURS["Domingo"] = {"enabled": False, "shifts": []}


# ============ BASIS FIXTURES ============

@pytest.fixture(scope="function")
def db():
    """
    Erstellt eine frische Datenbank für jeden Test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    FastAPI TestClient mit überschriebener Datenbank.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============ STAMMDATEN FIXTURES ============

@pytest.fixture
def tenant(db):
    t = Tenant(id=uuid4(), name="Grupo Test", is_active=True)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@pytest.fixture
def other_tenant(db):
    """Zweiter Tenant für Isolationstests"""
    t = Tenant(id=uuid4(), name="Otro Grupo", is_active=True)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@pytest.fixture
def restaurant(db, tenant):
    """Restaurant in Madrid mit Comida/Cena Montag bis Samstag"""
    r = Restaurant(
        id=uuid4(),
        tenant_id=tenant.id,
        name="Casa Test",
        timezone="Europe/Madrid",
        opening_hours=OPENING_HOURS,
        total_capacity=80,
        is_active=True
    )
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


@pytest.fixture
def second_restaurant(db, tenant):
    """Zweites Restaurant ohne Öffnungszeiten (Fallback-Turns)"""
    r = Restaurant(id=uuid4(), tenant_id=tenant.id, name="Bar Test", timezone="Europe/Madrid", is_active=True)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


@pytest.fixture
def foreign_restaurant(db, other_tenant):
    r = Restaurant(id=uuid4(), tenant_id=other_tenant.id, name="Fremdes Lokal", timezone="Europe/Madrid", is_active=True)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def _role(db, name: str) -> Role:
    role = Role(id=uuid4(), name=name)
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


@pytest.fixture
def role_owner(db):
    return _role(db, "Owner")


@pytest.fixture
def role_manager(db):
    return _role(db, "Manager")


@pytest.fixture
def role_staff(db):
    return _role(db, "Staff")


# ============ USER FIXTURES ============

@pytest.fixture
def owner_user(db, tenant, role_owner):
    """Owner sieht alle Restaurants des Tenants"""
    user = User(
        id=uuid4(),
        name="Test Owner",
        email="owner@test.com",
        password_hash=hash_password("ownerpass123"),
        tenant_id=tenant.id,
        role_id=role_owner.id,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def manager_user(db, tenant, role_manager, restaurant):
    """Manager, nur dem ersten Restaurant zugewiesen"""
    user = User(
        id=uuid4(),
        name="Test Manager",
        email="manager@test.com",
        password_hash=hash_password("managerpass123"),
        tenant_id=tenant.id,
        role_id=role_manager.id,
        is_active=True
    )
    user.restaurants.append(restaurant)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def staff_user(db, tenant, role_staff, restaurant):
    user = User(
        id=uuid4(),
        name="Test Staff",
        email="staff@test.com",
        password_hash=hash_password("staffpass123"),
        tenant_id=tenant.id,
        role_id=role_staff.id,
        is_active=True
    )
    user.restaurants.append(restaurant)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ============ AUTH TOKEN FIXTURES ============

def _login(client, email: str, password: str) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, f"Login failed for {email}: {response.json()}"
    return response.json()["access_token"]


@pytest.fixture
def owner_token(client, owner_user):
    return _login(client, "owner@test.com", "ownerpass123")


@pytest.fixture
def manager_token(client, manager_user):
    return _login(client, "manager@test.com", "managerpass123")


@pytest.fixture
def staff_token(client, staff_user):
    return _login(client, "staff@test.com", "staffpass123")


# ============ HELPER FUNKTIONEN ============

def auth_header(token: str) -> dict:
    """Erstellt Authorization Header"""
    return {"Authorization": f"Bearer {token}"}


def add_reservation(db, restaurant, when: datetime, party_size: int = 2, **kwargs) -> Reservation:
    """Legt eine Reservierung an, when wird nach UTC konvertiert"""
    reservation = Reservation(
        id=uuid4(),
        tenant_id=restaurant.tenant_id,
        restaurant_id=restaurant.id,
        name=kwargs.pop("name", "Gast"),
        party_size=party_size,
        datetime_utc=when.astimezone(timezone.utc),
        **kwargs
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation
