"""
User profile and directory search endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from chatcore.api.deps import CurrentUser, UserServiceDep
from chatcore.models.user import UserProfile, UserSearchResult

router = APIRouter()


@router.get("/me", response_model=UserProfile, response_model_by_alias=True)
async def get_current_user_profile(user: CurrentUser) -> UserProfile:
    return UserProfile.model_validate(user, from_attributes=True)


@router.get("/search", response_model=list[UserSearchResult], response_model_by_alias=True)
async def search_users(
    user: CurrentUser,
    user_service: UserServiceDep,
    query: str = Query("", max_length=100, description="Name or e-mail fragment"),
) -> list[UserSearchResult]:
    """Search users by name or e-mail. Queries shorter than two characters match nothing."""
    return await user_service.search(user.id, query)
