from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from letsroll.schemas.common import CamelModel


class MessageKind(str, Enum):
    TEXT = "TEXT"
    DICE_ROLL = "DICE_ROLL"
    NARRATION = "NARRATION"


class SessionEvent(str, Enum):
    JOIN_ROOM = "join_room"
    LEAVE_ROOM = "leave_room"
    SEND_MESSAGE = "send_message"
    ROLL_DICE = "roll_dice"
    RECEIVE_MESSAGE = "receive_message"
    JOINED = "joined"
    ERROR = "error"


class SessionFrame(BaseModel):
    """Envelope for every frame on the session socket."""
    event: str
    data: Any = None


class MessageAuthor(CamelModel):
    model_config = ConfigDict(extra="allow")

    username: str
    avatar: Optional[str] = None


class DiceRollRequest(CamelModel):
    campaign_id: int | str
    sides: Optional[int] = Field(default=None, gt=0)
    formula: Optional[str] = None
    user: Optional[MessageAuthor] = None
