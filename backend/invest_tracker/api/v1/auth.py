"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import get_db
from invest_tracker.dependencies import get_current_user
from invest_tracker.models.user import User
from invest_tracker.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from invest_tracker.schemas.common import ApiResponse, ok
from invest_tracker.services.auth_service import AuthService, issue_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/register",
    response_model=ApiResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user and sign them in.

    display_name defaults to the username.
    """
    user = await AuthService(db).register(
        username=data.username,
        password=data.password,
        display_name=data.display_name,
        email=data.email,
    )
    return ok({"token": issue_token(user), "user": user}, "Registered successfully")


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange username and password for a bearer token."""
    token, user = await AuthService(db).login(data.username, data.password)
    return ok({"token": token, "user": user}, "Logged in successfully")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the current user's profile."""
    return ok(current_user)


@router.post("/change-password", response_model=ApiResponse[None])
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await AuthService(db).change_password(current_user, data.current_password, data.new_password)
    return ok(message="Password changed successfully")
