"""User endpoints."""

from fastapi import APIRouter, Depends

from ....api.deps import get_current_user, platform_dependency
from ....capabilities.factory import Platform
from ....models.api_schemas import UserProfileResponse
from ....models.domain import UserIdentity
from ....services.user_service import ensure_user

router = APIRouter()


@router.get("/users/me", response_model=UserProfileResponse)
async def current_user_profile(
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """Return the caller's profile, creating it on first visit."""
    return UserProfileResponse(user=ensure_user(platform.datastore, user))
