from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Column, DateTime, Integer, String
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from letsroll.models.campaign import Campaign
    from letsroll.models.user import User

BASE_PV = 10
BASE_SAN = 10
BASE_PE = 5
DEFAULT_NEX = 5

ATTRIBUTE_NAMES = ("agilidade", "forca", "intelecto", "presenca", "vigor")


def _stat_column(default: int) -> Column:
    return Column(Integer, nullable=False, server_default=str(default))


class Character(SQLModel, table=True):
    __tablename__ = "characters"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    campaign_id: int = Field(foreign_key="campaigns.id", index=True, nullable=False)
    name: str = Field(nullable=False)
    # "class" is a keyword in Python, the column keeps the client's name
    character_class: str = Field(sa_column=Column("class", String(length=64), nullable=False))

    agilidade: int = Field(default=0, sa_column=_stat_column(0))
    forca: int = Field(default=0, sa_column=_stat_column(0))
    intelecto: int = Field(default=0, sa_column=_stat_column(0))
    presenca: int = Field(default=0, sa_column=_stat_column(0))
    vigor: int = Field(default=0, sa_column=_stat_column(0))

    pv: int = Field(default=BASE_PV, sa_column=_stat_column(BASE_PV))
    pv_max: int = Field(default=BASE_PV, sa_column=_stat_column(BASE_PV))
    san: int = Field(default=BASE_SAN, sa_column=_stat_column(BASE_SAN))
    san_max: int = Field(default=BASE_SAN, sa_column=_stat_column(BASE_SAN))
    pe: int = Field(default=BASE_PE, sa_column=_stat_column(BASE_PE))
    pe_max: int = Field(default=BASE_PE, sa_column=_stat_column(BASE_PE))
    nex: int = Field(default=DEFAULT_NEX, sa_column=_stat_column(DEFAULT_NEX))

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    user: Optional["User"] = Relationship(back_populates="characters")
    campaign: Optional["Campaign"] = Relationship(back_populates="characters")
