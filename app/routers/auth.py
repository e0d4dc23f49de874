import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.auth import LoginRequest, TokenResponse, RefreshRequest, PasswordChangeRequest
from app.schemas.user import UserResponse
from app.models import User
from app.utils.security import verify_password, create_access_token, create_refresh_token, decode_token, get_current_user, hash_password
from app.config import settings

from app.utils.rate_limit import limiter

logger = logging.getLogger("app.routers.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.login_rate_limit)
def login(
        request: Request,
        credentials: LoginRequest,
        db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user:
        raise HTTPException(status_code=401, detail="Email oder Passwort falsch")
    if not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Fehlgeschlagener Login für {credentials.email}")
        raise HTTPException(status_code=401, detail="Email oder Passwort falsch")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account deaktiviert")

    access_token = create_access_token({"sub": str(user.id)})
    refresh_token = create_refresh_token({"sub": str(user.id)})

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh_access_token(request: RefreshRequest):
    payload = decode_token(request.refresh_token, "refresh")
    if not payload:
        raise HTTPException(status_code=401, detail="Refresh Token abgelaufen")

    access_token = create_access_token({"sub": (payload.get("sub"))})
    refresh_token = create_refresh_token({"sub": (payload.get("sub"))})

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token
    )

@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


# Passwort ändern
@router.patch("/me/password")
def change_password(
                request: PasswordChangeRequest,
                db: Session = Depends(get_db),
                current_user: User = Depends(get_current_user)
) -> dict:
    if not verify_password(request.old_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Altes Passwort ist falsch")
    if request.old_password == request.new_password:
        raise HTTPException(status_code=400, detail="Das neue Passwort muss sich von dem bestehenden Passwort unterscheiden")

    current_user.password_hash = hash_password(request.new_password)
    db.commit()

    return {"message": "Passwort erfolgreich geändert"}
