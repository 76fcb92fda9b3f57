from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.config import settings
from letsroll.models.campaign import Campaign, CampaignMember, CampaignRole, CampaignStatus
from letsroll.models.character import Character
from letsroll.models.user import User
from letsroll.schemas.campaign import CampaignCreate

TEMPLATE_FIELDS = ("items", "abilities", "npcs", "creatures")


class AlreadyMemberError(Exception):
    """Raised when a user already belongs to the campaign."""


class MemberNotFoundError(Exception):
    """Raised when the targeted membership does not exist."""


class LastMasterError(Exception):
    """Raised when a change would leave a campaign without a master."""


def _campaign_options(*, with_characters: bool) -> list:
    options = [selectinload(Campaign.members).selectinload(CampaignMember.user)]
    if with_characters:
        options.append(selectinload(Campaign.characters).selectinload(Character.user))
    else:
        # Counting characters only needs the rows, not their owners
        options.append(selectinload(Campaign.characters))
    return options


async def get_campaign(
    session: AsyncSession,
    campaign_id: int,
    *,
    with_characters: bool = False,
    populate_existing: bool = False,
) -> Campaign | None:
    """Fetch a campaign with members (and optionally character owners) loaded."""
    stmt = (
        select(Campaign)
        .where(Campaign.id == campaign_id)
        .options(*_campaign_options(with_characters=with_characters))
    )
    if populate_existing:
        stmt = stmt.execution_options(populate_existing=True)
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_membership(
    session: AsyncSession,
    *,
    campaign_id: int,
    user_id: int,
) -> CampaignMember | None:
    stmt = select(CampaignMember).where(
        CampaignMember.campaign_id == campaign_id,
        CampaignMember.user_id == user_id,
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def list_user_memberships(session: AsyncSession, *, user_id: int) -> List[CampaignMember]:
    """Memberships of ``user_id`` with each campaign hydrated for listing."""
    stmt = (
        select(CampaignMember)
        .where(CampaignMember.user_id == user_id)
        .options(
            selectinload(CampaignMember.campaign)
            .selectinload(Campaign.members)
            .selectinload(CampaignMember.user),
            selectinload(CampaignMember.campaign).selectinload(Campaign.characters),
        )
        .order_by(CampaignMember.joined_at.desc())
        .execution_options(populate_existing=True)
    )
    result = await session.exec(stmt)
    return list(result.all())


def _dump_templates(templates: Iterable[Any] | None) -> list[dict[str, Any]]:
    if not templates:
        return []
    return [template.model_dump(by_alias=True) for template in templates]


async def create_campaign(session: AsyncSession, *, creator: User, data: CampaignCreate) -> Campaign:
    """Create the campaign and make ``creator`` its master in the same flush."""
    now = datetime.now(timezone.utc)
    campaign = Campaign(
        name=data.name,
        description=data.description or None,
        cover_image=data.cover_image or None,
        system=data.system or settings.DEFAULT_GAME_SYSTEM,
        status=CampaignStatus.ACTIVE,
        items=_dump_templates(data.items),
        abilities=_dump_templates(data.abilities),
        npcs=_dump_templates(data.npcs),
        creatures=_dump_templates(data.creatures),
        created_at=now,
        updated_at=now,
    )
    session.add(campaign)
    await session.flush()
    session.add(
        CampaignMember(
            campaign_id=campaign.id,
            user_id=creator.id,
            role=CampaignRole.MASTER,
        )
    )
    await session.flush()
    return campaign


def apply_campaign_update(campaign: Campaign, changes: dict[str, Any]) -> Campaign:
    """Copy the provided fields onto ``campaign``; absent fields are left alone."""
    for field, value in changes.items():
        if field in TEMPLATE_FIELDS:
            value = [dict(template) for template in value] if value is not None else []
        elif field in {"name", "system", "status"} and value is None:
            continue
        setattr(campaign, field, value)
    campaign.updated_at = datetime.now(timezone.utc)
    return campaign


def archive_campaign(campaign: Campaign) -> Campaign:
    campaign.status = CampaignStatus.ENDED
    campaign.updated_at = datetime.now(timezone.utc)
    return campaign


async def ensure_remaining_master(
    session: AsyncSession,
    *,
    campaign_id: int,
    exclude_user_ids: set[int] | None = None,
) -> None:
    exclude = exclude_user_ids or set()
    stmt = select(CampaignMember).where(
        CampaignMember.campaign_id == campaign_id,
        CampaignMember.role == CampaignRole.MASTER,
    )
    result = await session.exec(stmt)
    masters = [member for member in result.all() if member.user_id not in exclude]
    if not masters:
        raise LastMasterError(campaign_id)


async def add_member(
    session: AsyncSession,
    *,
    campaign_id: int,
    user: User,
    role: CampaignRole = CampaignRole.PLAYER,
) -> CampaignMember:
    existing = await get_membership(session, campaign_id=campaign_id, user_id=user.id)
    if existing:
        raise AlreadyMemberError(user.id)
    membership = CampaignMember(campaign_id=campaign_id, user_id=user.id, role=role)
    session.add(membership)
    await session.flush()
    return membership


async def change_member_role(
    session: AsyncSession,
    *,
    campaign_id: int,
    user_id: int,
    role: CampaignRole,
) -> CampaignMember:
    membership = await get_membership(session, campaign_id=campaign_id, user_id=user_id)
    if membership is None:
        raise MemberNotFoundError(user_id)
    if membership.role == CampaignRole.MASTER and role != CampaignRole.MASTER:
        await ensure_remaining_master(session, campaign_id=campaign_id, exclude_user_ids={user_id})
    membership.role = role
    session.add(membership)
    await session.flush()
    return membership


async def remove_member(session: AsyncSession, *, campaign_id: int, user_id: int) -> None:
    membership = await get_membership(session, campaign_id=campaign_id, user_id=user_id)
    if membership is None:
        raise MemberNotFoundError(user_id)
    if membership.role == CampaignRole.MASTER:
        await ensure_remaining_master(session, campaign_id=campaign_id, exclude_user_ids={user_id})
    # Characters only live inside a membership
    characters = await session.exec(
        select(Character).where(Character.campaign_id == campaign_id, Character.user_id == user_id)
    )
    for character in characters.all():
        await session.delete(character)
    await session.delete(membership)
    await session.flush()
