# PURPOSE: password hashing, JWT issue/verify, and the current-user guard.

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt
from sqlalchemy.orm import Session

from .config import settings
from .db_models import UserDB
from .errors import TokenError, TokenExpired, TokenInvalid, TokenMalformed, Unauthorized
from .models import UserPublic
from .security import ensure_csrf
from .store_db import get_db

logger = logging.getLogger("taskboard.auth")

# OAuth2 bearer extraction; auto_error=False so the cookie can be tried next.
# Point tokenUrl to versioned endpoint for accurate OpenAPI examples
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


# --- Password helpers (bcrypt, no passlib) ---

def hash_password(password: str) -> str:
    """Return a bcrypt hash for the given plain password."""
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain password against its bcrypt hash (constant-time compare)."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # malformed stored hash or over-long password
        return False


# --- JWT helpers ---

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def get_access_token_ttl_minutes() -> int:
    return settings.JWT_EXPIRE_MIN


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT binding `user_id` (as `sub`) with issue and expiry times.
    Expiration defaults to settings.JWT_EXPIRE_MIN.
    """
    issued = _now_utc()
    if expires_delta is None:
        expires_delta = timedelta(minutes=get_access_token_ttl_minutes())
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued,
        "exp": issued + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by `token`.

    Raises TokenMalformed when the string is not a decodable JWT at all,
    TokenExpired when the signature is good but `exp` has passed, and
    TokenInvalid for signature mismatches or a missing/garbled subject.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as err:
        raise TokenMalformed(str(err)) from err

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as err:
        raise TokenExpired(str(err)) from err
    except JWTError as err:
        raise TokenInvalid(str(err)) from err

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise TokenInvalid("token subject is not a user id") from err


# --- Guard ---

def get_current_user(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> UserPublic:
    """Resolve the caller from a bearer header or the auth cookie.

    The resolved user is also stored on ``request.state.user``.
    """
    token = bearer
    from_cookie = False
    if not token:
        token = request.cookies.get(settings.AUTH_COOKIE_NAME)
        from_cookie = bool(token)
    if not token:
        raise Unauthorized("Not authorized, no token")

    try:
        user_id = decode_access_token(token)
    except TokenError as exc:
        logger.debug("token rejected reason=%s detail=%s", type(exc).__name__, exc)
        raise Unauthorized("Not authorized, token failed") from exc

    row = db.get(UserDB, user_id)
    if row is None:
        logger.debug("token rejected reason=UnknownUser user_id=%s", user_id)
        raise Unauthorized("Not authorized, user not found")

    # cookies ride along on cross-site requests; bearer headers don't
    if from_cookie and request.method in UNSAFE_METHODS:
        ensure_csrf(request)

    user = UserPublic.model_validate(row)
    request.state.user = user
    return user
