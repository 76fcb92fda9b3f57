from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.models.campaign import CampaignMember, CampaignRole
from letsroll.models.character import (
    ATTRIBUTE_NAMES,
    BASE_PE,
    BASE_PV,
    BASE_SAN,
    Character,
)
from letsroll.schemas.character import CharacterAttributes


def initial_resources(attributes: CharacterAttributes) -> dict[str, int]:
    """Starting PV/SAN/PE for a new character; PV grows with vigor."""
    pv = BASE_PV + attributes.vigor
    return {
        "pv": pv,
        "pv_max": pv,
        "san": BASE_SAN,
        "san_max": BASE_SAN,
        "pe": BASE_PE,
        "pe_max": BASE_PE,
    }


def build_character(
    *,
    user_id: int,
    campaign_id: int,
    name: str,
    character_class: str,
    attributes: CharacterAttributes | None = None,
) -> Character:
    attributes = attributes or CharacterAttributes()
    return Character(
        user_id=user_id,
        campaign_id=campaign_id,
        name=name,
        character_class=character_class,
        **{attr: getattr(attributes, attr) for attr in ATTRIBUTE_NAMES},
        **initial_resources(attributes),
    )


async def get_character(
    session: AsyncSession,
    character_id: int,
    *,
    with_relations: bool = False,
) -> Character | None:
    stmt = select(Character).where(Character.id == character_id)
    if with_relations:
        stmt = stmt.options(
            selectinload(Character.user),
            selectinload(Character.campaign),
        ).execution_options(populate_existing=True)
    result = await session.exec(stmt)
    return result.one_or_none()


async def list_campaign_characters(session: AsyncSession, *, campaign_id: int) -> List[Character]:
    stmt = (
        select(Character)
        .where(Character.campaign_id == campaign_id)
        .options(selectinload(Character.user))
        .order_by(Character.created_at.asc(), Character.id.asc())
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    return list(result.all())


def can_edit(character: Character, *, user_id: int, membership: CampaignMember | None) -> bool:
    """The owner or a master may edit, both only while in the campaign."""
    if membership is None:
        return False
    return character.user_id == user_id or membership.role == CampaignRole.MASTER


def apply_character_update(character: Character, changes: dict[str, Any]) -> Character:
    for field, value in changes.items():
        # name and class cannot be cleared, stats are never null
        if value is None:
            continue
        setattr(character, field, value)
    character.updated_at = datetime.now(timezone.utc)
    return character
