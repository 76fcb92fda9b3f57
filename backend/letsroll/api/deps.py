import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.config import settings
from letsroll.core.messages import AuthMessages
from letsroll.core.security import decode_access_token
from letsroll.db.session import get_session, get_session_factory
from letsroll.models.user import User
from letsroll.schemas.token import TokenPayload
from letsroll.services import users as users_service

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
# Long-lived connections (websockets) open short sessions per operation
SessionFactoryDep = Annotated[sessionmaker, Depends(get_session_factory)]

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


class TokenError(Exception):
    """Raised when a bearer token cannot be turned into a user id."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


def read_token_subject(token: str) -> int:
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except ExpiredSignatureError as exc:
        raise TokenError(AuthMessages.EXPIRED_TOKEN) from exc
    except JWTError as exc:
        raise TokenError(AuthMessages.INVALID_TOKEN) from exc

    if not token_data.sub or not token_data.sub.isdigit():
        raise TokenError(AuthMessages.INVALID_TOKEN)
    return int(token_data.sub)


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> User:
    try:
        user_id = read_token_subject(token)
    except TokenError as exc:
        logger.info("Rejected bearer token: %s", exc.detail)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    user = await users_service.get_user(session, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=AuthMessages.USER_NOT_FOUND)
    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)]
) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.INACTIVE_USER)
    return current_user


CurrentUser = Annotated[User, Depends(get_current_active_user)]
