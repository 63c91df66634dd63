# Auth Router
# Registration, login and the current user

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.decorators import AuthError
from auth.dependencies import get_current_user
from auth.utils import create_access_token, get_password_hash, verify_password
from core.errors import ConflictError
from database.config import get_db
from database.models import User, UserRole
from schemas.marketplace import LoginRequest, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_response(user: User, message: str) -> dict:
    token = create_access_token(user.id, user.role.value)
    return {
        "success": True,
        "message": message,
        "data": {
            "access_token": token,
            "token_type": "bearer",
            "user": UserResponse.model_validate(user),
        },
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create a brand or influencer account and return an access token."""
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User already exists with this email")

    user = User(
        email=email,
        password_hash=get_password_hash(payload.password),
        role=UserRole(payload.role.value),
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists with this email")
    db.refresh(user)

    logger.info(f"Registered {user.role.value} user {user.id}")
    return _token_response(user, "User registered successfully")


@router.post("/login")
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthError("Invalid credentials", status_code=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        raise AuthError("Account is deactivated", status_code=status.HTTP_403_FORBIDDEN)

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return _token_response(user, "Login successful")


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": UserResponse.model_validate(current_user)}
