from fastapi import APIRouter

from letsroll.api.endpoints import auth, campaigns, characters, session

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(campaigns.router, prefix="/campaigns", tags=["campaigns"])
api_router.include_router(characters.router, prefix="/characters", tags=["characters"])
api_router.include_router(session.router, prefix="/session", tags=["session"])
