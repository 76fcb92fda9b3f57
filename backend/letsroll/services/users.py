from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.config import settings
from letsroll.core.security import get_password_hash, verify_password
from letsroll.models.user import User


class InvalidTimezoneError(ValueError):
    """Raised when a timezone name is not a known IANA zone."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_timezone(name: str) -> str:
    cleaned = name.strip()
    try:
        ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(cleaned) from exc
    return cleaned


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    result = await session.exec(select(User).where(User.id == user_id))
    return result.one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    stmt = select(User).where(func.lower(User.username) == username.strip().lower())
    result = await session.exec(stmt)
    return result.one_or_none()


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    username: str,
    password: str,
    timezone_name: str | None = None,
) -> User:
    """Add a new user to the session; the caller commits."""
    user = User(
        email=normalize_email(email),
        username=username.strip(),
        hashed_password=get_password_hash(password),
        timezone=validate_timezone(timezone_name) if timezone_name else settings.DEFAULT_TIMEZONE,
    )
    session.add(user)
    await session.flush()
    return user


async def authenticate(session: AsyncSession, *, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def apply_profile_update(user: User, changes: dict) -> User:
    if "timezone" in changes and changes["timezone"] is not None:
        changes["timezone"] = validate_timezone(changes["timezone"])
    for field, value in changes.items():
        if field == "timezone" and value is None:
            continue
        setattr(user, field, value)
    user.updated_at = datetime.now(timezone.utc)
    return user
