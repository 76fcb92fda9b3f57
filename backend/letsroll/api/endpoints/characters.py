import logging
from typing import List

from fastapi import APIRouter, HTTPException, status

from letsroll.api.deps import CurrentUser, SessionDep
from letsroll.core.messages import CharacterMessages
from letsroll.models.character import Character
from letsroll.schemas.character import (
    CharacterCreate,
    CharacterDetail,
    CharacterRead,
    CharacterUpdate,
    CharacterWithOwner,
)
from letsroll.schemas.common import MessageResponse
from letsroll.services import campaigns as campaigns_service
from letsroll.services import characters as characters_service

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_character_or_404(
    session: SessionDep,
    character_id: int,
    *,
    with_relations: bool = False,
) -> Character:
    character = await characters_service.get_character(session, character_id, with_relations=with_relations)
    if not character:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CharacterMessages.NOT_FOUND)
    return character


@router.post("", response_model=CharacterRead, status_code=status.HTTP_201_CREATED)
async def create_character(
    character_in: CharacterCreate,
    session: SessionDep,
    current_user: CurrentUser,
) -> CharacterRead:
    membership = await campaigns_service.get_membership(
        session,
        campaign_id=character_in.campaign_id,
        user_id=current_user.id,
    )
    if membership is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CharacterMessages.MEMBERSHIP_REQUIRED)

    character = characters_service.build_character(
        user_id=current_user.id,
        campaign_id=character_in.campaign_id,
        name=character_in.name,
        character_class=character_in.character_class,
        attributes=character_in.attributes,
    )
    session.add(character)
    await session.commit()
    await session.refresh(character)
    logger.info("User %s created character %s in campaign %s", current_user.id, character.id, character.campaign_id)
    return CharacterRead.model_validate(character)


@router.get("/campaign/{campaign_id}", response_model=List[CharacterWithOwner])
async def list_campaign_characters(
    campaign_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> List[CharacterWithOwner]:
    membership = await campaigns_service.get_membership(session, campaign_id=campaign_id, user_id=current_user.id)
    if membership is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CharacterMessages.CAMPAIGN_ACCESS_DENIED)
    characters = await characters_service.list_campaign_characters(session, campaign_id=campaign_id)
    return [CharacterWithOwner.model_validate(character) for character in characters]


@router.get("/{character_id}", response_model=CharacterDetail)
async def read_character(
    character_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> CharacterDetail:
    character = await _get_character_or_404(session, character_id, with_relations=True)
    membership = await campaigns_service.get_membership(
        session,
        campaign_id=character.campaign_id,
        user_id=current_user.id,
    )
    if membership is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CharacterMessages.ACCESS_DENIED)
    return CharacterDetail.model_validate(character)


@router.put("/{character_id}", response_model=CharacterRead)
async def update_character(
    character_id: int,
    character_in: CharacterUpdate,
    session: SessionDep,
    current_user: CurrentUser,
) -> CharacterRead:
    character = await _get_character_or_404(session, character_id)
    membership = await campaigns_service.get_membership(
        session,
        campaign_id=character.campaign_id,
        user_id=current_user.id,
    )
    if not characters_service.can_edit(character, user_id=current_user.id, membership=membership):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CharacterMessages.EDIT_DENIED)

    characters_service.apply_character_update(character, character_in.model_dump(exclude_unset=True))
    session.add(character)
    await session.commit()
    await session.refresh(character)
    return CharacterRead.model_validate(character)


@router.delete("/{character_id}", response_model=MessageResponse)
async def delete_character(
    character_id: int,
    session: SessionDep,
    current_user: CurrentUser,
) -> MessageResponse:
    character = await _get_character_or_404(session, character_id)
    if character.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CharacterMessages.DELETE_DENIED)
    await session.delete(character)
    await session.commit()
    logger.info("User %s deleted character %s", current_user.id, character_id)
    return MessageResponse(message=CharacterMessages.DELETED)
