from __future__ import annotations

import os
from typing import Optional

from fastapi import HTTPException, Request, status
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from ..config import settings


def _get_serializer() -> URLSafeTimedSerializer:
    secret = settings.CSRF_SECRET
    # Use a stable salt to bind purpose; change to rotate
    return URLSafeTimedSerializer(secret_key=secret, salt="taskboard.csrf.v1")


def generate_csrf_token() -> str:
    """Create a signed CSRF token string."""
    s = _get_serializer()
    # Payload can be random; signature protects integrity.
    payload = os.urandom(16).hex()
    return s.dumps(payload)


def validate_csrf_token(token: str, max_age: Optional[int] = None) -> bool:
    """Validate CSRF token signature and optional TTL."""
    if not token:
        return False
    s = _get_serializer()
    try:
        s.loads(token, max_age=max_age or settings.CSRF_TOKEN_TTL_SECONDS)
        return True
    except (BadSignature, SignatureExpired):
        return False


def set_csrf_cookie(response, token: Optional[str] = None) -> str:
    """Ensure CSRF cookie is set; returns the token used."""
    t = token or generate_csrf_token()
    response.set_cookie(
        key=settings.CSRF_COOKIE_NAME,
        value=t,
        httponly=False,  # the SPA reads it and echoes it in the header
        secure=settings.CSRF_COOKIE_SECURE,
        samesite=settings.CSRF_COOKIE_SAMESITE,
        max_age=settings.CSRF_TOKEN_TTL_SECONDS,
    )
    return t


def ensure_csrf(request: Request) -> None:
    """Enforce double-submit CSRF on a cookie-authenticated, state-changing request.

    The signed token from the cookie must be valid and echoed verbatim in the
    CSRF header.
    """
    if not settings.CSRF_ENFORCE:
        return None

    cookie_token = request.cookies.get(settings.CSRF_COOKIE_NAME, "")
    provided = request.headers.get(settings.CSRF_HEADER_NAME, "")

    if not (cookie_token and provided):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="CSRF token missing")

    if not (validate_csrf_token(cookie_token) and validate_csrf_token(provided)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="CSRF token invalid")

    if cookie_token != provided:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="CSRF token mismatch")

    return None
