"""
Test data factories for creating database models.

Each factory accepts overrides for any model field and commits by default so
the created rows are visible to API requests made through the test client.
"""

from functools import lru_cache
from itertools import count
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.security import create_access_token, get_password_hash
from letsroll.models.campaign import Campaign, CampaignMember, CampaignRole, CampaignStatus
from letsroll.models.character import Character
from letsroll.models.user import User
from letsroll.schemas.character import CharacterAttributes
from letsroll.services.characters import build_character

DEFAULT_PASSWORD = "testpassword123"

_sequence = count(1)


@lru_cache
def _default_password_hash() -> str:
    # One bcrypt hash shared by every factory user
    return get_password_hash(DEFAULT_PASSWORD)


async def create_user(
    session: AsyncSession,
    commit: bool = True,
    **overrides: Any,
) -> User:
    """
    Create a test user with sensible defaults.

    Example:
        user = await create_user(session, username="mestre")
    """
    n = next(_sequence)
    password = overrides.pop("password", None)
    defaults = {
        "email": f"user-{n}@example.com",
        "username": f"player{n}",
        "hashed_password": get_password_hash(password) if password else _default_password_hash(),
        "timezone": "UTC",
        "is_active": True,
    }
    user = User(**{**defaults, **overrides})
    session.add(user)

    if commit:
        await session.commit()
        await session.refresh(user)

    return user


async def create_campaign(
    session: AsyncSession,
    master: User | None = None,
    commit: bool = True,
    **overrides: Any,
) -> Campaign:
    """
    Create a test campaign with ``master`` as its MASTER member.

    The master is created when not provided.
    """
    if master is None:
        master = await create_user(session, commit=commit)

    defaults = {
        "name": f"Test Campaign {next(_sequence)}",
        "description": "A test campaign",
        "system": "Ordem Paranormal",
        "status": CampaignStatus.ACTIVE,
    }
    campaign = Campaign(**{**defaults, **overrides})
    session.add(campaign)
    await session.flush()
    session.add(CampaignMember(campaign_id=campaign.id, user_id=master.id, role=CampaignRole.MASTER))

    if commit:
        await session.commit()
        await session.refresh(campaign)

    return campaign


async def create_campaign_member(
    session: AsyncSession,
    campaign: Campaign,
    user: User,
    role: CampaignRole = CampaignRole.PLAYER,
    commit: bool = True,
) -> CampaignMember:
    membership = CampaignMember(campaign_id=campaign.id, user_id=user.id, role=role)
    session.add(membership)

    if commit:
        await session.commit()
        await session.refresh(membership)

    return membership


async def create_character(
    session: AsyncSession,
    owner: User,
    campaign: Campaign,
    commit: bool = True,
    attributes: CharacterAttributes | None = None,
    **overrides: Any,
) -> Character:
    """
    Create a character with derived resources computed from ``attributes``.

    Example:
        character = await create_character(session, player, campaign, nex=35)
    """
    character = build_character(
        user_id=owner.id,
        campaign_id=campaign.id,
        name=overrides.pop("name", f"Agente {next(_sequence)}"),
        character_class=overrides.pop("character_class", "Combatente"),
        attributes=attributes,
    )
    for key, value in overrides.items():
        setattr(character, key, value)
    session.add(character)

    if commit:
        await session.commit()
        await session.refresh(character)

    return character


def get_auth_token(user: User) -> str:
    """
    Generate a valid JWT access token for a user.

    Example:
        token = get_auth_token(test_user)
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    """
    return create_access_token(
        subject=user.id,
        extra_claims={"email": user.email, "username": user.username},
    )


def get_auth_headers(user: User) -> dict[str, str]:
    token = get_auth_token(user)
    return {"Authorization": f"Bearer {token}"}
