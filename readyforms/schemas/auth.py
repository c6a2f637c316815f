from pydantic import BaseModel, EmailStr, Field

from readyforms.schemas.common import TrimmedStr
from readyforms.schemas.user import User


class RegisterRequest(BaseModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    language: str = Field(default="en", min_length=2, max_length=16)
    theme: str = Field(default="light", pattern="^(light|dark|system)$")
    is_admin: bool = False


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = Field(default="Bearer", json_schema_extra={"example": "Bearer"})
    expires_in: int
    user: User
