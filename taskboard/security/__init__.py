# Security utilities package

from .csrf import (
    generate_csrf_token,
    validate_csrf_token,
    ensure_csrf,
    set_csrf_cookie,
)

__all__ = [
    "generate_csrf_token",
    "validate_csrf_token",
    "ensure_csrf",
    "set_csrf_cookie",
]
