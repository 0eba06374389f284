"""
Authentication schemas.
"""
from pydantic import BaseModel, Field

from clubdesk.schemas.member import MemberResponse


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    member: MemberResponse


class PasswordChange(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=8)
