from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import ConfigDict, Field, field_validator

from letsroll.core.messages import CampaignMessages
from letsroll.models.campaign import CampaignRole, CampaignStatus
from letsroll.schemas.character import CharacterWithOwner
from letsroll.schemas.common import CamelModel
from letsroll.schemas.user import UserPublic

if TYPE_CHECKING:  # pragma: no cover
    from letsroll.models.campaign import Campaign


class TemplateModel(CamelModel):
    # Templates are free-form; keep whatever else the wizard sends
    model_config = ConfigDict(extra="allow")


class TemplateProperty(TemplateModel):
    name: str = ""
    description: str = ""


class StatusBar(TemplateModel):
    title: str = ""
    type: str = ""


class AcquirableTemplate(TemplateModel):
    """An item or ability template from the wizard's second step."""
    title: str = ""
    properties: List[TemplateProperty] = Field(default_factory=list)


class PersonalityTemplate(TemplateModel):
    """An NPC or creature template from the wizard's third step."""
    name: str = ""
    bars: List[StatusBar] = Field(default_factory=list)
    properties: List[TemplateProperty] = Field(default_factory=list)


class CampaignTemplates(CamelModel):
    items: List[AcquirableTemplate] = Field(default_factory=list)
    abilities: List[AcquirableTemplate] = Field(default_factory=list)
    npcs: List[PersonalityTemplate] = Field(default_factory=list)
    creatures: List[PersonalityTemplate] = Field(default_factory=list)


def _clean_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(CampaignMessages.NAME_REQUIRED)
    return cleaned


class CampaignCreate(CampaignTemplates):
    name: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    system: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _clean_name(value)


class CampaignUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    system: Optional[str] = Field(default=None, min_length=1)
    status: Optional[CampaignStatus] = None
    items: Optional[List[AcquirableTemplate]] = None
    abilities: Optional[List[AcquirableTemplate]] = None
    npcs: Optional[List[PersonalityTemplate]] = None
    creatures: Optional[List[PersonalityTemplate]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _clean_name(value)


class CampaignMemberRead(CamelModel):
    user_id: int
    role: CampaignRole
    joined_at: datetime
    user: UserPublic


class CampaignMemberAdd(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    role: CampaignRole = CampaignRole.PLAYER


class CampaignMemberUpdate(CamelModel):
    role: CampaignRole


class CampaignRead(CampaignTemplates):
    id: int
    name: str
    description: Optional[str] = None
    cover_image: Optional[str] = None
    system: str
    status: CampaignStatus
    created_at: datetime
    updated_at: datetime
    members: List[CampaignMemberRead] = Field(default_factory=list)


class CampaignSummary(CampaignRead):
    character_count: int = 0
    my_role: CampaignRole


class CampaignList(CamelModel):
    as_master: List[CampaignSummary] = Field(default_factory=list)
    as_player: List[CampaignSummary] = Field(default_factory=list)


class CampaignDetail(CampaignSummary):
    member_count: int = 0
    characters: List[CharacterWithOwner] = Field(default_factory=list)


class CampaignArchiveResponse(CamelModel):
    message: str
    campaign: CampaignRead


def serialize_members(campaign: "Campaign") -> List[CampaignMemberRead]:
    members: List[CampaignMemberRead] = []
    for membership in getattr(campaign, "members", []) or []:
        if membership.user is None:
            continue
        members.append(
            CampaignMemberRead(
                user_id=membership.user_id,
                role=membership.role,
                joined_at=membership.joined_at,
                user=UserPublic.model_validate(membership.user),
            )
        )
    return members


def serialize_campaign(campaign: "Campaign") -> CampaignRead:
    return CampaignRead(
        id=campaign.id,
        name=campaign.name,
        description=campaign.description,
        cover_image=campaign.cover_image,
        system=campaign.system,
        status=campaign.status,
        items=campaign.items or [],
        abilities=campaign.abilities or [],
        npcs=campaign.npcs or [],
        creatures=campaign.creatures or [],
        created_at=campaign.created_at,
        updated_at=campaign.updated_at,
        members=serialize_members(campaign),
    )


def serialize_campaign_summary(campaign: "Campaign", *, my_role: CampaignRole) -> CampaignSummary:
    base = serialize_campaign(campaign)
    return CampaignSummary(
        **base.model_dump(),
        character_count=len(getattr(campaign, "characters", []) or []),
        my_role=my_role,
    )


def serialize_campaign_detail(campaign: "Campaign", *, my_role: CampaignRole) -> CampaignDetail:
    base = serialize_campaign(campaign)
    characters = [
        CharacterWithOwner.model_validate(character)
        for character in getattr(campaign, "characters", []) or []
    ]
    return CampaignDetail(
        **base.model_dump(),
        character_count=len(characters),
        member_count=len(base.members),
        my_role=my_role,
        characters=characters,
    )
