"""
In-app notifications.

WHAT: Create, list and acknowledge user notifications
WHY: Tell initiators when a counterpart joins and both parties when a deal lands
HOW: Rows in the notifications collection; creation failures never break the caller
"""

from typing import Optional

from ..capabilities.interfaces import Datastore
from ..models.domain import NotificationRecord
from ..utils.exceptions import NotificationNotFoundException
from ..utils.logger import get_logger

logger = get_logger(__name__)


def notify(
    datastore: Datastore,
    user_id: str,
    type: str,
    title: str,
    message: str,
    negotiation_id: Optional[str] = None
) -> Optional[NotificationRecord]:
    """
    Create a notification, logging instead of raising on failure.

    Returns:
        The stored notification, or None if it could not be created
    """
    try:
        row = datastore.create("notifications", {
            "user_id": user_id,
            "negotiation_id": negotiation_id,
            "type": type,
            "title": title,
            "message": message,
            "read_status": False,
        })
    except Exception as e:
        logger.error(f"Error creating {type} notification for {user_id}: {e}", exc_info=True)
        return None
    return NotificationRecord.model_validate(row)


def list_notifications(datastore: Datastore, user_id: str) -> list[NotificationRecord]:
    rows = datastore.list("notifications", {"user_id": user_id}, order_by="created_at", descending=True)
    return [NotificationRecord.model_validate(row) for row in rows]


def mark_notification_read(datastore: Datastore, user_id: str, notification_id: str) -> NotificationRecord:
    """Mark one of the user's notifications as read."""
    rows = datastore.list("notifications", {"id": notification_id, "user_id": user_id})
    if not rows:
        raise NotificationNotFoundException(notification_id)
    updated = datastore.update("notifications", notification_id, {"read_status": True})
    return NotificationRecord.model_validate(updated)
