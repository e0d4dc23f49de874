from passlib.context import CryptContext

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, joinedload

from functools import wraps
from uuid import UUID
import asyncio

from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from app.config import settings

from app.models.user import User, user_restaurants
from app.models.restaurant import Restaurant
from app.models.role import TENANT_WIDE_ROLES

from app.database import get_db


# Password
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

# JWT

def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    to_encode['exp'] = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode['type'] = 'access'
    return jwt.encode(to_encode, settings.secret_key, settings.jwt_algorithm)

def create_refresh_token(data: dict) -> str:
    to_encode = data.copy()
    to_encode['exp'] = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    to_encode['type'] = 'refresh'
    return jwt.encode(to_encode, settings.secret_key, settings.jwt_algorithm)

def decode_token(token: str, expected_type: str = None) -> dict:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        if expected_type and payload.get('type') != expected_type:
            return None
        return payload
    except JWTError:
        return None



oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_current_user(extracted_token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    payload = decode_token(extracted_token, "access")
    if not payload:
        raise HTTPException(status_code=401, detail="Token ungültig")
    try:
        user_id = UUID(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Token ungültig")
    user = db.query(User)\
        .options(joinedload(User.role))\
        .filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User nicht in DB")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account deaktiviert")
    return user

# Decorator der kontrolliert ob User-Role Zugriff auf den Endpunkt hat
def require_role(allowed_roles: list):
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_user = kwargs.get("current_user")
            if not current_user:
                raise HTTPException(status_code=401, detail="Nicht eingeloggt")
            if not current_user.role or current_user.role.name not in allowed_roles:
                raise HTTPException(status_code=403, detail="Keine Berechtigung")
            if asyncio.iscoroutinefunction(func):
                return await func(*args, **kwargs)
            else:
                return func(*args, **kwargs)
        return wrapper
    return decorator


# Tenant / Restaurant Zugriff

def has_tenant_wide_access(user: User) -> bool:
    return bool(user.role) and user.role.name in TENANT_WIDE_ROLES

def accessible_restaurant_ids(db: Session, user: User) -> list[UUID]:
    """
    Restaurants, die der User sehen darf:
    - Owner/Admin: alle aktiven Restaurants des Tenants
    - Manager/Staff: nur zugewiesene Restaurants (user_restaurants)
    """
    query = db.query(Restaurant.id).filter(
        Restaurant.tenant_id == user.tenant_id,
        Restaurant.is_active == True
    )
    if not has_tenant_wide_access(user):
        query = query.join(user_restaurants, user_restaurants.c.restaurant_id == Restaurant.id)\
            .filter(user_restaurants.c.user_id == user.id)
    return [row.id for row in query.all()]

def get_accessible_restaurant(db: Session, user: User, restaurant_id: UUID) -> Restaurant | None:
    """Restaurant nur zurückgeben, wenn der User Zugriff hat (sonst None)"""
    if restaurant_id not in accessible_restaurant_ids(db, user):
        return None
    return db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
