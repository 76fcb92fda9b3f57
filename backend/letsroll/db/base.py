"""Import all models for Alembic or metadata creation."""

from letsroll.models.campaign import Campaign, CampaignMember
from letsroll.models.character import Character
from letsroll.models.user import User

__all__ = [
    "User",
    "Campaign",
    "CampaignMember",
    "Character",
]
