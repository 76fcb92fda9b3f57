from datetime import datetime
from typing import Optional

from pydantic import Field

from letsroll.schemas.common import CamelModel


class UserPublic(CamelModel):
    """Public user information exposed to other campaign members"""
    id: int
    username: str
    avatar: Optional[str] = None


class UserSummary(UserPublic):
    email: str


class UserRead(UserSummary):
    bio: Optional[str] = None
    timezone: str
    created_at: datetime


class UserSelfUpdate(CamelModel):
    avatar: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    timezone: Optional[str] = None
