from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from letsroll.core.messages import AuthMessages
from letsroll.core.security import MAX_PASSWORD_BYTES
from letsroll.schemas.user import UserSummary


class RegisterRequest(BaseModel):
    email: EmailStr
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)
    timezone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(AuthMessages.PASSWORD_TOO_LONG)
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    token: str
    user: UserSummary
