# PURPOSE: input cleaning and field checks shared by schemas and stores.

import re

from email_validator import EmailNotValidError, validate_email

from .errors import InvalidInput

# angle brackets and control characters (tab/newline/carriage return are kept)
_UNSAFE_CHARS = re.compile(r"[<>\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"\d")

PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
PASSWORD_MAX_BYTES = 72
NAME_MAX_LENGTH = 50


def sanitize_text(value: str) -> str:
    """Trim and drop characters that have no business in free-text fields."""
    return _UNSAFE_CHARS.sub("", value).strip()


def sanitize_tags(values) -> list:
    """Sanitize each tag and drop the ones left empty; non-strings pass through."""
    cleaned = []
    for value in values:
        if isinstance(value, str):
            value = sanitize_text(value)
            if not value:
                continue
        cleaned.append(value)
    return cleaned


def normalize_email(email: str) -> str:
    """Return the sanitized, lower-cased email or raise InvalidInput."""
    candidate = sanitize_text(email or "")
    try:
        info = validate_email(candidate, check_deliverability=False)
    except EmailNotValidError as err:
        raise InvalidInput("Please provide a valid email") from err
    return info.normalized.lower()


def normalize_name(name: str) -> str:
    cleaned = sanitize_text(name or "")
    if not cleaned:
        raise InvalidInput("Please provide a name")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise InvalidInput(f"Name cannot be more than {NAME_MAX_LENGTH} characters")
    return cleaned


def check_password_strength(password: str) -> None:
    """At least 6 characters with a letter and a digit; bcrypt caps the length."""
    if (
        not isinstance(password, str)
        or len(password) < PASSWORD_MIN_LENGTH
        or not _HAS_LETTER.search(password)
        or not _HAS_DIGIT.search(password)
    ):
        raise InvalidInput(
            "Password must be at least 6 characters and contain at least one letter and one number"
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise InvalidInput(f"Password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
