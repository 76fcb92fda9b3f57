import logging

from fastapi import APIRouter, HTTPException, status

from letsroll.api.deps import CurrentUser, SessionDep
from letsroll.core.messages import CampaignMessages
from letsroll.models.campaign import Campaign, CampaignMember, CampaignRole
from letsroll.models.user import User
from letsroll.schemas.campaign import (
    CampaignArchiveResponse,
    CampaignCreate,
    CampaignDetail,
    CampaignList,
    CampaignMemberAdd,
    CampaignMemberRead,
    CampaignMemberUpdate,
    CampaignRead,
    CampaignUpdate,
    serialize_campaign,
    serialize_campaign_detail,
    serialize_campaign_summary,
    serialize_members,
)
from letsroll.schemas.common import MessageResponse
from letsroll.services import campaigns as campaigns_service
from letsroll.services import users as users_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _require_membership(
    session: SessionDep,
    campaign_id: int,
    current_user: User,
    *,
    detail: str = CampaignMessages.ACCESS_DENIED,
) -> CampaignMember:
    membership = await campaigns_service.get_membership(
        session,
        campaign_id=campaign_id,
        user_id=current_user.id,
    )
    if membership is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return membership


async def _require_master(
    session: SessionDep,
    campaign_id: int,
    current_user: User,
    *,
    detail: str,
) -> CampaignMember:
    membership = await _require_membership(session, campaign_id, current_user, detail=detail)
    if membership.role != CampaignRole.MASTER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return membership


async def _get_campaign_or_404(
    session: SessionDep,
    campaign_id: int,
    *,
    with_characters: bool = False,
) -> Campaign:
    # Collections are kept in the identity map across commits, always refresh them
    campaign = await campaigns_service.get_campaign(
        session,
        campaign_id,
        with_characters=with_characters,
        populate_existing=True,
    )
    if not campaign:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CampaignMessages.NOT_FOUND)
    return campaign


async def _ensure_campaign_exists(session: SessionDep, campaign_id: int) -> None:
    if await session.get(Campaign, campaign_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CampaignMessages.NOT_FOUND)


@router.post("", response_model=CampaignRead, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    campaign_in: CampaignCreate,
    session: SessionDep,
    current_user: CurrentUser,
) -> CampaignRead:
    campaign = await campaigns_service.create_campaign(session, creator=current_user, data=campaign_in)
    await session.commit()
    logger.info("User %s created campaign %s", current_user.id, campaign.id)
    campaign = await _get_campaign_or_404(session, campaign.id)
    return serialize_campaign(campaign)


@router.get("", response_model=CampaignList)
async def list_campaigns(session: SessionDep, current_user: CurrentUser) -> CampaignList:
    memberships = await campaigns_service.list_user_memberships(session, user_id=current_user.id)
    listing = CampaignList()
    for membership in memberships:
        if membership.campaign is None:
            continue
        summary = serialize_campaign_summary(membership.campaign, my_role=membership.role)
        if membership.role == CampaignRole.MASTER:
            listing.as_master.append(summary)
        else:
            listing.as_player.append(summary)
    return listing


@router.get("/{campaign_id}", response_model=CampaignDetail)
async def read_campaign(
    campaign_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> CampaignDetail:
    await _ensure_campaign_exists(session, campaign_id)
    membership = await _require_membership(session, campaign_id, current_user)
    campaign = await _get_campaign_or_404(session, campaign_id, with_characters=True)
    return serialize_campaign_detail(campaign, my_role=membership.role)


@router.put("/{campaign_id}", response_model=CampaignRead)
async def update_campaign(
    campaign_id: int,
    campaign_in: CampaignUpdate,
    session: SessionDep,
    current_user: CurrentUser,
) -> CampaignRead:
    await _ensure_campaign_exists(session, campaign_id)
    await _require_master(session, campaign_id, current_user, detail=CampaignMessages.MASTER_REQUIRED_EDIT)
    campaign = await _get_campaign_or_404(session, campaign_id)
    campaigns_service.apply_campaign_update(campaign, campaign_in.model_dump(exclude_unset=True))
    session.add(campaign)
    await session.commit()
    campaign = await _get_campaign_or_404(session, campaign_id)
    return serialize_campaign(campaign)


@router.delete("/{campaign_id}", response_model=CampaignArchiveResponse)
async def archive_campaign(
    campaign_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> CampaignArchiveResponse:
    await _ensure_campaign_exists(session, campaign_id)
    await _require_master(session, campaign_id, current_user, detail=CampaignMessages.MASTER_REQUIRED_ARCHIVE)
    campaign = await _get_campaign_or_404(session, campaign_id)
    campaigns_service.archive_campaign(campaign)
    session.add(campaign)
    await session.commit()
    logger.info("User %s archived campaign %s", current_user.id, campaign_id)
    campaign = await _get_campaign_or_404(session, campaign_id)
    return CampaignArchiveResponse(message=CampaignMessages.ARCHIVED, campaign=serialize_campaign(campaign))


@router.post(
    "/{campaign_id}/members",
    response_model=list[CampaignMemberRead],
    status_code=status.HTTP_201_CREATED,
)
async def add_campaign_member(
    campaign_id: int,
    member_in: CampaignMemberAdd,
    session: SessionDep,
    current_user: CurrentUser,
) -> list[CampaignMemberRead]:
    await _ensure_campaign_exists(session, campaign_id)
    await _require_master(session, campaign_id, current_user, detail=CampaignMessages.MASTER_REQUIRED_MEMBERS)

    if member_in.username:
        user = await users_service.get_user_by_username(session, member_in.username)
    elif member_in.email:
        user = await users_service.get_user_by_email(session, member_in.email)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CampaignMessages.MEMBER_IDENTIFIER_REQUIRED)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CampaignMessages.MEMBER_NOT_FOUND)

    try:
        await campaigns_service.add_member(session, campaign_id=campaign_id, user=user, role=member_in.role)
    except campaigns_service.AlreadyMemberError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CampaignMessages.ALREADY_MEMBER) from exc
    await session.commit()

    campaign = await _get_campaign_or_404(session, campaign_id)
    return serialize_members(campaign)


@router.put("/{campaign_id}/members/{user_id}", response_model=list[CampaignMemberRead])
async def update_campaign_member(
    campaign_id: int,
    user_id: int,
    member_in: CampaignMemberUpdate,
    session: SessionDep,
    current_user: CurrentUser,
) -> list[CampaignMemberRead]:
    await _ensure_campaign_exists(session, campaign_id)
    await _require_master(session, campaign_id, current_user, detail=CampaignMessages.MASTER_REQUIRED_MEMBERS)
    try:
        await campaigns_service.change_member_role(
            session,
            campaign_id=campaign_id,
            user_id=user_id,
            role=member_in.role,
        )
    except campaigns_service.MemberNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CampaignMessages.MEMBER_NOT_FOUND) from exc
    except campaigns_service.LastMasterError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CampaignMessages.LAST_MASTER) from exc
    await session.commit()

    campaign = await _get_campaign_or_404(session, campaign_id)
    return serialize_members(campaign)


@router.delete("/{campaign_id}/members/{user_id}", response_model=MessageResponse)
async def remove_campaign_member(
    campaign_id: int,
    user_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> MessageResponse:
    await _ensure_campaign_exists(session, campaign_id)
    if user_id == current_user.id:
        # Anyone may leave a campaign on their own
        await _require_membership(session, campaign_id, current_user)
    else:
        await _require_master(session, campaign_id, current_user, detail=CampaignMessages.MASTER_REQUIRED_MEMBERS)
    try:
        await campaigns_service.remove_member(session, campaign_id=campaign_id, user_id=user_id)
    except campaigns_service.MemberNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CampaignMessages.MEMBER_NOT_FOUND) from exc
    except campaigns_service.LastMasterError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=CampaignMessages.LAST_MASTER) from exc
    await session.commit()
    return MessageResponse(message=CampaignMessages.MEMBER_REMOVED)
