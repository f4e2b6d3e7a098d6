# taskboard/routers/auth.py
# PURPOSE: /auth/register, /auth/login, /auth/profile, /auth/logout

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from .. import accounts
from ..auth import create_access_token, get_access_token_ttl_minutes, get_current_user
from ..config import settings
from ..models import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdate,
    RegisterRequest,
    UserEnvelope,
    UserPublic,
)
from ..rate_limit import limiter
from ..security import set_csrf_cookie
from ..store_db import get_db

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(response: Response, user, message: str) -> AuthResponse:
    """Issue a JWT, mirror it into an httponly cookie, and hand out a CSRF token."""
    token = create_access_token(user.id)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        max_age=get_access_token_ttl_minutes() * 60,
    )
    set_csrf_cookie(response)
    return AuthResponse(message=message, token=token, user=UserPublic.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
def register_user(
    request: Request, response: Response, payload: RegisterRequest, db: Session = Depends(get_db)
):
    user = accounts.register(db, name=payload.name, email=payload.email, password=payload.password)
    return _token_response(response, user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    user = accounts.verify_credentials(db, email=payload.email, password=payload.password)
    return _token_response(response, user, "Login successful")


@router.get("/profile", response_model=UserEnvelope)
def get_profile(user: UserPublic = Depends(get_current_user)):
    # If token is valid, user is injected
    return UserEnvelope(data=user)


@router.put("/profile", response_model=UserEnvelope)
def update_profile(
    payload: ProfileUpdate,
    user: UserPublic = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = accounts.update_profile(
        db, user.id, name=payload.name, email=payload.email, avatar=payload.avatar
    )
    return UserEnvelope(message="Profile updated successfully", data=UserPublic.model_validate(row))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, user: UserPublic = Depends(get_current_user)):
    # Tokens are stateless: this only drops the cookie, a copied token stays valid until exp
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    response.delete_cookie(settings.CSRF_COOKIE_NAME)
    return MessageResponse(message="Logout successful")
