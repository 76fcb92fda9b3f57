from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, TYPE_CHECKING

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Enum as SQLEnum, Field, Relationship, SQLModel

from letsroll.core.config import settings

if TYPE_CHECKING:  # pragma: no cover
    from letsroll.models.character import Character
    from letsroll.models.user import User


class CampaignStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ENDED = "ENDED"


class CampaignRole(str, Enum):
    MASTER = "MASTER"
    PLAYER = "PLAYER"
    OBSERVER = "OBSERVER"


class CampaignMember(SQLModel, table=True):
    __tablename__ = "campaign_members"

    campaign_id: int = Field(foreign_key="campaigns.id", primary_key=True)
    user_id: int = Field(foreign_key="users.id", primary_key=True)
    role: CampaignRole = Field(
        default=CampaignRole.PLAYER,
        sa_column=Column(
            SQLEnum(CampaignRole, name="campaign_role"),
            nullable=False,
            server_default=CampaignRole.PLAYER.value,
        ),
    )
    joined_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    campaign: Optional["Campaign"] = Relationship(back_populates="members")
    user: Optional["User"] = Relationship(back_populates="campaign_memberships")


class Campaign(SQLModel, table=True):
    __tablename__ = "campaigns"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    cover_image: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    system: str = Field(
        default=settings.DEFAULT_GAME_SYSTEM,
        sa_column=Column(String(length=128), nullable=False, server_default=settings.DEFAULT_GAME_SYSTEM),
    )
    status: CampaignStatus = Field(
        default=CampaignStatus.ACTIVE,
        sa_column=Column(
            SQLEnum(CampaignStatus, name="campaign_status"),
            nullable=False,
            server_default=CampaignStatus.ACTIVE.value,
        ),
    )
    # Wizard templates, stored as the client sends them
    items: List[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    abilities: List[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    npcs: List[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    creatures: List[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    members: List["CampaignMember"] = Relationship(
        back_populates="campaign",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    characters: List["Character"] = Relationship(
        back_populates="campaign",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
