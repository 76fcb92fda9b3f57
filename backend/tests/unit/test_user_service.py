"""
Unit tests for user service functions.

Tests the business logic in letsroll.services.users including:
- Email normalization and case-insensitive lookups
- Password authentication
- Timezone validation on profile updates
"""

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.security import verify_password
from letsroll.services import users as user_service
from letsroll.testing import DEFAULT_PASSWORD, create_user


@pytest.mark.unit
@pytest.mark.service
async def test_create_user_hashes_password(session: AsyncSession):
    user = await user_service.create_user(
        session,
        email=" Nova@Example.com ",
        username=" nova ",
        password="segredo",
    )

    assert user.id is not None
    assert user.email == "nova@example.com"
    assert user.username == "nova"
    assert user.hashed_password != "segredo"
    assert verify_password("segredo", user.hashed_password)
    assert user.timezone == "America/Sao_Paulo"


@pytest.mark.unit
@pytest.mark.service
async def test_create_user_rejects_unknown_timezone(session: AsyncSession):
    with pytest.raises(user_service.InvalidTimezoneError):
        await user_service.create_user(
            session,
            email="tz@example.com",
            username="tz",
            password="segredo",
            timezone_name="Atlantis/Capital",
        )


@pytest.mark.unit
@pytest.mark.service
async def test_lookups_ignore_case(session: AsyncSession):
    user = await create_user(session, email="case@example.com", username="Caixa")

    assert (await user_service.get_user_by_email(session, "CASE@example.com")).id == user.id
    assert (await user_service.get_user_by_username(session, "caixa")).id == user.id


@pytest.mark.unit
@pytest.mark.service
async def test_authenticate(session: AsyncSession):
    user = await create_user(session, email="auth@example.com")

    assert (await user_service.authenticate(session, email="auth@example.com", password=DEFAULT_PASSWORD)).id == user.id
    assert await user_service.authenticate(session, email="auth@example.com", password="errada") is None
    assert await user_service.authenticate(session, email="ghost@example.com", password=DEFAULT_PASSWORD) is None


@pytest.mark.unit
@pytest.mark.service
async def test_apply_profile_update(session: AsyncSession):
    user = await create_user(session)

    user_service.apply_profile_update(user, {"bio": "Mestre de mesa", "timezone": " Europe/Lisbon ", "avatar": None})

    assert user.bio == "Mestre de mesa"
    assert user.timezone == "Europe/Lisbon"
    assert user.avatar is None


@pytest.mark.unit
@pytest.mark.service
async def test_apply_profile_update_keeps_timezone_when_null(session: AsyncSession):
    user = await create_user(session, timezone="Asia/Tokyo")

    user_service.apply_profile_update(user, {"timezone": None})

    assert user.timezone == "Asia/Tokyo"
