from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from letsroll.core.config import settings

BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def get_password_hash(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def create_access_token(
    subject: str | int,
    *,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a JWT for ``subject`` (the user id).

    ``extra_claims`` are copied into the payload as-is; the client reads
    ``email`` and ``username`` from it without a round trip to ``/auth/me``.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: dict[str, Any] = {**(extra_claims or {}), "sub": str(subject), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token; raises ``jose.JWTError`` when invalid or expired."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
