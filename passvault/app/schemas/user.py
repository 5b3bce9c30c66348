# passvault/app/schemas/user.py
from typing import Optional

from pydantic import BaseModel


# Registration request; master_password is the client's auth key, never the encryption key
class UserCreate(BaseModel):
    login: str = ""
    master_password: str = ""
    encryption_salt: str = ""


class UserLogin(BaseModel):
    login: str = ""
    master_password: str = ""


# Returned to the authenticated client so it can derive its encryption key
class UserParams(BaseModel):
    login: str
    encryption_salt: str

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    iss: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None
