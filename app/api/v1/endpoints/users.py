"""
User Routes

Endpoints for user profile management.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentUser
from app.core.database import get_db
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserResponse
from app.services import user_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_me(current_user: CurrentUser) -> User:
    """
    Get the currently logged-in user's profile.

    This endpoint requires authentication via Bearer token.

    Args:
        current_user: Authenticated user from dependency.

    Returns:
        UserResponse: Current user's profile data.
    """
    return current_user


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Update current user profile",
)
async def update_me(
    profile_update: ProfileUpdate,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Update the currently logged-in user's profile.

    Only provided fields will be updated.

    Raises:
        IdentityAlreadyExists: 409 if the new email is already registered.
    """
    return await user_service.update_profile(
        db,
        current_user,
        full_name=profile_update.full_name,
        email=profile_update.email,
    )
