"""
Authentication endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member
from clubdesk.core.security import issue_member_token
from clubdesk.models.member import Member
from clubdesk.schemas.auth import LoginRequest, PasswordChange, TokenResponse
from clubdesk.schemas.common import MessageResponse
from clubdesk.schemas.member import MemberResponse
from clubdesk.services import members as member_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange username and password for a bearer token."""
    member = await member_service.authenticate(db, credentials.username, credentials.password)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    token = issue_member_token(member.id, role=member.role.value)
    return TokenResponse(token=token, member=MemberResponse.model_validate(member))


@router.get("/me", response_model=MemberResponse)
async def me(current_member: Member = Depends(get_current_member)):
    return MemberResponse.model_validate(current_member)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    await member_service.change_password(db, current_member, data.currentPassword, data.newPassword)
    return MessageResponse(message="Password changed")
