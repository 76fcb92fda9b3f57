"""Request throttling for the public auth endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from letsroll.core.config import settings


def client_address(request: Request) -> str:
    """Key requests by the caller's address; proxy headers count only with BEHIND_PROXY."""
    if settings.BEHIND_PROXY:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return get_remote_address(request)


def auth_rate_limit() -> str:
    return settings.RATE_LIMIT_AUTH


limiter = Limiter(key_func=client_address)
