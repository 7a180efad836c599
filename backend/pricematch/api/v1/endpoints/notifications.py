"""
Notification endpoints.

WHAT: List and acknowledge in-app notifications
WHY: Counterpart-joined and deal-found messages for the caller
HOW: FastAPI router over notification_service
"""

from fastapi import APIRouter, Depends

from ....api.deps import get_current_user, platform_dependency
from ....capabilities.factory import Platform
from ....models.api_schemas import NotificationListResponse
from ....models.domain import UserIdentity, NotificationRecord
from ....services.notification_service import list_notifications, mark_notification_read

router = APIRouter()


@router.get("/notifications", response_model=NotificationListResponse)
async def get_notifications(
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    notifications = list_notifications(platform.datastore, user.id)
    return NotificationListResponse(
        notifications=notifications,
        unread=sum(1 for n in notifications if not n.read_status),
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationRecord)
async def read_notification(
    notification_id: str,
    user: UserIdentity = Depends(get_current_user),
    platform: Platform = Depends(platform_dependency),
):
    return mark_notification_read(platform.datastore, user.id, notification_id)
