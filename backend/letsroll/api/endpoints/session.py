import json
import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from letsroll.api.deps import SessionFactoryDep, TokenError, read_token_subject
from letsroll.core.config import settings
from letsroll.core.messages import SessionMessages
from letsroll.models.user import User
from letsroll.schemas.session import DiceRollRequest, SessionEvent, SessionFrame
from letsroll.services import campaigns as campaigns_service
from letsroll.services import dice as dice_service
from letsroll.services import users as users_service
from letsroll.services.realtime import room_manager

router = APIRouter()
logger = logging.getLogger(__name__)


async def _ws_authenticate(token: Optional[str], session_factory) -> Optional[User]:
    if not token:
        return None
    try:
        user_id = read_token_subject(token)
    except TokenError as exc:
        logger.info("Session WS: rejected token (%s)", exc.detail)
        return None
    async with session_factory() as session:
        user = await users_service.get_user(session, user_id)
    if user is None or not user.is_active:
        return None
    return user


def _campaign_id_from(data: Any) -> Optional[int]:
    """Accept a bare id or an object carrying ``campaignId``."""
    if isinstance(data, dict):
        data = data.get("campaignId")
    if isinstance(data, bool) or data is None:
        return None
    try:
        return int(str(data).strip())
    except ValueError:
        return None


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json({"event": SessionEvent.ERROR.value, "data": {"message": detail}})


async def _join_room(websocket: WebSocket, user: User, data: Any, session_factory) -> None:
    campaign_id = _campaign_id_from(data)
    if campaign_id is None:
        await _send_error(websocket, SessionMessages.CAMPAIGN_REQUIRED)
        return
    async with session_factory() as session:
        membership = await campaigns_service.get_membership(session, campaign_id=campaign_id, user_id=user.id)
    if membership is None:
        logger.warning("Session WS: user %s is not a member of campaign %s", user.id, campaign_id)
        await _send_error(websocket, SessionMessages.NOT_A_MEMBER)
        return
    await room_manager.join(campaign_id, websocket)
    logger.info("Session WS: user %s joined campaign %s", user.id, campaign_id)
    await websocket.send_json({"event": SessionEvent.JOINED.value, "data": {"campaignId": campaign_id}})


async def _leave_room(websocket: WebSocket, user: User, data: Any) -> None:
    campaign_id = _campaign_id_from(data)
    if campaign_id is None:
        await _send_error(websocket, SessionMessages.CAMPAIGN_REQUIRED)
        return
    await room_manager.leave(campaign_id, websocket)
    logger.info("Session WS: user %s left campaign %s", user.id, campaign_id)


async def _relay_message(websocket: WebSocket, data: Any) -> None:
    campaign_id = _campaign_id_from(data)
    if campaign_id is None:
        await _send_error(websocket, SessionMessages.CAMPAIGN_REQUIRED)
        return
    if not room_manager.in_room(campaign_id, websocket):
        await _send_error(websocket, SessionMessages.NOT_IN_ROOM)
        return
    exclude = None if settings.REALTIME_ECHO_TO_SENDER else websocket
    await room_manager.broadcast(campaign_id, SessionEvent.RECEIVE_MESSAGE.value, data, exclude=exclude)


async def _roll_dice(websocket: WebSocket, user: User, data: Any) -> None:
    try:
        request = DiceRollRequest.model_validate(data)
    except ValidationError:
        await _send_error(websocket, SessionMessages.INVALID_DICE)
        return
    campaign_id = _campaign_id_from(request.campaign_id)
    if campaign_id is None:
        await _send_error(websocket, SessionMessages.CAMPAIGN_REQUIRED)
        return
    if not room_manager.in_room(campaign_id, websocket):
        await _send_error(websocket, SessionMessages.NOT_IN_ROOM)
        return

    if request.user is not None:
        author = request.user.model_dump(by_alias=True)
    else:
        author = {"username": user.username, "avatar": user.avatar}
    try:
        message = dice_service.build_roll_message(
            campaign_id=request.campaign_id,
            user=author,
            sides=request.sides,
            formula=request.formula,
        )
    except dice_service.UnsupportedDiceError:
        await _send_error(websocket, SessionMessages.INVALID_DICE)
        return
    await room_manager.broadcast(campaign_id, SessionEvent.RECEIVE_MESSAGE.value, message)


async def _dispatch(websocket: WebSocket, user: User, raw: str, session_factory) -> None:
    try:
        frame = SessionFrame.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError):
        await _send_error(websocket, SessionMessages.INVALID_FRAME)
        return

    if frame.event == SessionEvent.JOIN_ROOM:
        await _join_room(websocket, user, frame.data, session_factory)
    elif frame.event == SessionEvent.LEAVE_ROOM:
        await _leave_room(websocket, user, frame.data)
    elif frame.event == SessionEvent.SEND_MESSAGE:
        await _relay_message(websocket, frame.data)
    elif frame.event == SessionEvent.ROLL_DICE:
        await _roll_dice(websocket, user, frame.data)
    else:
        await _send_error(websocket, SessionMessages.UNKNOWN_EVENT)


@router.websocket("/ws")
async def session_socket(
    websocket: WebSocket,
    session_factory: SessionFactoryDep,
    token: Annotated[Optional[str], Query()] = None,
) -> None:
    """Campaign session relay.

    Protocol:
    1. Client connects with ``?token=<jwt>``; an invalid token closes with 1008
    2. Client sends ``{"event": "join_room", "data": <campaignId>}`` per campaign
    3. ``send_message`` frames are relayed to the room as ``receive_message``
    4. ``roll_dice`` frames are resolved server side and relayed the same way

    Nothing is persisted; rooms are dropped when the connection closes.
    """
    user = await _ws_authenticate(token, session_factory)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    logger.info("Session WS: user %s connected", user.id)
    try:
        while True:
            raw = await websocket.receive_text()
            await _dispatch(websocket, user, raw, session_factory)
    except WebSocketDisconnect:
        pass
    finally:
        rooms = await room_manager.leave_all(websocket)
        logger.info("Session WS: user %s disconnected, left rooms %s", user.id, rooms)
