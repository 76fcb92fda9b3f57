from typing import Optional

from pydantic import BaseModel


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
