"""
Dashboard endpoints.

WHAT: Per-user dashboard and platform-wide admin statistics
WHY: Overview pages for participants and operators
HOW: FastAPI router over dashboard_service
"""

from fastapi import APIRouter, Depends

from ....api.deps import get_current_user, platform_dependency, require_admin
from ....capabilities.factory import Platform
from ....models.api_schemas import DashboardResponse, AdminStatsResponse
from ....models.domain import UserIdentity
from ....services.dashboard_service import build_user_dashboard, build_admin_stats
from ....services.user_service import ensure_user

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def user_dashboard(
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    """Stats, negotiations and deals for the caller."""
    ensure_user(platform.datastore, user)
    return build_user_dashboard(platform.datastore, user.id)


@router.get("/admin/stats", response_model=AdminStatsResponse)
async def admin_stats(
    admin: UserIdentity = Depends(require_admin),
    platform: Platform = Depends(platform_dependency),
):
    """
    Platform statistics.

    Returns:
        Users, negotiations, deals, revenue and derived ratios
    """
    ensure_user(platform.datastore, admin)
    return build_admin_stats(platform.datastore)
