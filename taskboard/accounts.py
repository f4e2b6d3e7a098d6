"""User accounts: registration, credential checks and profile updates.

Passwords never leave this module in plaintext form: they are checked for
strength, hashed with bcrypt and dropped. Log lines carry user ids and
emails only.
"""

from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .auth import hash_password, verify_password
from .db_models import UserDB, now_utc
from .errors import DuplicateEmail, InvalidCredentials, InvalidInput, NotFound
from .validation import check_password_strength, normalize_email, normalize_name, sanitize_text

logger = logging.getLogger("taskboard.accounts")


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # checked against when the email is unknown, so both failures cost a bcrypt round
    return hash_password(secrets.token_urlsafe(16))


def warm_up() -> None:
    """Compute the dummy hash ahead of the first login attempt."""
    _dummy_hash()


def _login_email(email: str) -> str:
    # same normalization as registration; unparseable input still gets a lookup
    try:
        return normalize_email(email)
    except InvalidInput:
        return sanitize_text(email or "").lower()


def _email_taken(db: Session, email: str, *, exclude_id: Optional[int] = None) -> bool:
    query = db.query(UserDB.id).filter(UserDB.email == email)
    if exclude_id is not None:
        query = query.filter(UserDB.id != exclude_id)
    return query.first() is not None


def _commit_unique(db: Session, email: str) -> None:
    """Commit, turning a unique-index violation on email into DuplicateEmail."""
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        logger.info("email conflict at commit email=%s", email)
        raise DuplicateEmail() from err


def get_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.get(UserDB, user_id)


def register(db: Session, *, name: str, email: str, password: str) -> UserDB:
    """Create a user; raises InvalidInput or DuplicateEmail."""
    clean_name = normalize_name(name)
    clean_email = normalize_email(email)
    check_password_strength(password)

    if _email_taken(db, clean_email):
        raise DuplicateEmail()

    now = now_utc()
    user = UserDB(
        name=clean_name,
        email=clean_email,
        password_hash=hash_password(password),
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    _commit_unique(db, clean_email)
    db.refresh(user)
    logger.info("user registered user_id=%s", user.id)
    return user


def verify_credentials(db: Session, *, email: str, password: str) -> UserDB:
    """Return the user for a matching email/password pair.

    Unknown email and wrong password both raise the same InvalidCredentials,
    and both pay for one bcrypt comparison.
    """
    lookup = _login_email(email)
    user = db.query(UserDB).filter(UserDB.email == lookup).one_or_none()
    if user is None:
        verify_password(password or "", _dummy_hash())
        logger.info("login failed")
        raise InvalidCredentials()
    if not verify_password(password or "", user.password_hash):
        logger.info("login failed")
        raise InvalidCredentials()

    user.last_login = now_utc()
    db.commit()
    db.refresh(user)
    logger.info("login ok user_id=%s", user.id)
    return user


def update_profile(
    db: Session,
    user_id: int,
    *,
    name: Optional[str] = None,
    email: Optional[str] = None,
    avatar: Optional[str] = None,
) -> UserDB:
    """Change name/email/avatar; fields left as None keep their value."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")

    changes = {}
    if name is not None:
        changes["name"] = normalize_name(name)
    if email is not None:
        clean_email = normalize_email(email)
        if _email_taken(db, clean_email, exclude_id=user_id):
            raise DuplicateEmail("Email is already taken")
        changes["email"] = clean_email
    if avatar is not None:
        changes["avatar"] = sanitize_text(avatar) or None

    # validate everything first so a bad field leaves the row untouched
    for field, value in changes.items():
        setattr(user, field, value)
    _commit_unique(db, user.email)
    db.refresh(user)
    logger.info("profile updated user_id=%s fields=%s", user_id, ",".join(sorted(changes)))
    return user
