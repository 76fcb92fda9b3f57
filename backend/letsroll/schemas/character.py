from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from letsroll.schemas.common import CamelModel
from letsroll.schemas.user import UserPublic


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("must not be blank")
    return cleaned


class CharacterAttributes(CamelModel):
    agilidade: int = Field(default=0, ge=0)
    forca: int = Field(default=0, ge=0)
    intelecto: int = Field(default=0, ge=0)
    presenca: int = Field(default=0, ge=0)
    vigor: int = Field(default=0, ge=0)


class CharacterCreate(CamelModel):
    campaign_id: int
    name: str
    character_class: str = Field(alias="class")
    attributes: Optional[CharacterAttributes] = None

    check_text = field_validator("name", "character_class")(_not_blank)


class CharacterUpdate(CamelModel):
    name: Optional[str] = None
    character_class: Optional[str] = Field(default=None, alias="class")
    agilidade: Optional[int] = Field(default=None, ge=0)
    forca: Optional[int] = Field(default=None, ge=0)
    intelecto: Optional[int] = Field(default=None, ge=0)
    presenca: Optional[int] = Field(default=None, ge=0)
    vigor: Optional[int] = Field(default=None, ge=0)
    pv: Optional[int] = None
    pv_max: Optional[int] = Field(default=None, ge=0)
    san: Optional[int] = None
    san_max: Optional[int] = Field(default=None, ge=0)
    pe: Optional[int] = None
    pe_max: Optional[int] = Field(default=None, ge=0)
    nex: Optional[int] = Field(default=None, ge=0, le=99)

    check_text = field_validator("name", "character_class")(_not_blank)


class CharacterRead(CamelModel):
    id: int
    user_id: int
    campaign_id: int
    name: str
    character_class: str = Field(alias="class")
    agilidade: int
    forca: int
    intelecto: int
    presenca: int
    vigor: int
    pv: int
    pv_max: int
    san: int
    san_max: int
    pe: int
    pe_max: int
    nex: int
    created_at: datetime
    updated_at: datetime


class CampaignBrief(CamelModel):
    id: int
    name: str
    system: str


class CharacterWithOwner(CharacterRead):
    user: UserPublic


class CharacterDetail(CharacterWithOwner):
    campaign: CampaignBrief
