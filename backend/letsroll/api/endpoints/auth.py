import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError

from letsroll.api.deps import CurrentUser, SessionDep
from letsroll.core.messages import AuthMessages
from letsroll.core.rate_limit import auth_rate_limit, limiter
from letsroll.core.security import create_access_token
from letsroll.models.user import User
from letsroll.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from letsroll.schemas.user import UserRead, UserSelfUpdate, UserSummary
from letsroll.services import users as users_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(
        subject=user.id,
        extra_claims={"email": user.email, "username": user.username},
    )
    return AuthResponse(token=token, user=UserSummary.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_rate_limit)
async def register(request: Request, user_in: RegisterRequest, session: SessionDep) -> AuthResponse:
    username = user_in.username.strip()
    if not username:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.MISSING_FIELDS)

    if await users_service.get_user_by_email(session, user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.EMAIL_TAKEN)
    if await users_service.get_user_by_username(session, username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.USERNAME_TAKEN)

    try:
        user = await users_service.create_user(
            session,
            email=user_in.email,
            username=username,
            password=user_in.password,
            timezone_name=user_in.timezone,
        )
        await session.commit()
    except users_service.InvalidTimezoneError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.INVALID_TIMEZONE) from exc
    except IntegrityError as exc:
        # Lost a race with a concurrent registration of the same email/username
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.REGISTRATION_FAILED) from exc

    await session.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(auth_rate_limit)
async def login(request: Request, credentials: LoginRequest, session: SessionDep) -> AuthResponse:
    user = await users_service.authenticate(session, email=credentials.email, password=credentials.password)
    if not user:
        logger.info("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AuthMessages.INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.INACTIVE_USER)
    return _auth_response(user)


@router.get("/me", response_model=UserRead)
async def read_me(current_user: CurrentUser) -> UserRead:
    return UserRead.model_validate(current_user)


@router.put("/me", response_model=UserRead)
async def update_me(update_in: UserSelfUpdate, session: SessionDep, current_user: CurrentUser) -> UserRead:
    changes = update_in.model_dump(exclude_unset=True)
    try:
        users_service.apply_profile_update(current_user, changes)
    except users_service.InvalidTimezoneError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=AuthMessages.INVALID_TIMEZONE) from exc
    session.add(current_user)
    await session.commit()
    await session.refresh(current_user)
    return UserRead.model_validate(current_user)
