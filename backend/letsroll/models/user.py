from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlmodel import Field, Relationship, SQLModel

from letsroll.core.config import settings

if TYPE_CHECKING:  # pragma: no cover
    from letsroll.models.campaign import CampaignMember
    from letsroll.models.character import Character


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, nullable=False)
    username: str = Field(index=True, unique=True, nullable=False)
    hashed_password: str
    avatar: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    bio: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    timezone: str = Field(
        default=settings.DEFAULT_TIMEZONE,
        sa_column=Column(String(length=64), nullable=False, server_default=settings.DEFAULT_TIMEZONE),
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="true"),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    campaign_memberships: List["CampaignMember"] = Relationship(back_populates="user")
    characters: List["Character"] = Relationship(back_populates="user")
