"""
Unit tests for notifications.

WHAT: Test creation, listing order and read acknowledgement
WHY: Notification failures must never break the negotiation flow
HOW: Real SQLite datastore plus a failing stub
"""

from datetime import datetime

import pytest

from pricematch.services.notification_service import (
    list_notifications,
    mark_notification_read,
    notify,
)
from pricematch.utils.exceptions import NotificationNotFoundException


class FailingDatastore:
    """Datastore whose writes always fail."""

    def create(self, collection, record):
        raise RuntimeError("datastore unavailable")


@pytest.mark.unit
def test_notify_stores_unread_notification(datastore):
    notification = notify(datastore, "user_alice", "deal_found", "Deal found!", "Done", negotiation_id="neg_1")

    assert notification.user_id == "user_alice"
    assert notification.negotiation_id == "neg_1"
    assert notification.read_status is False


@pytest.mark.unit
def test_notify_returns_none_when_store_fails():
    assert notify(FailingDatastore(), "user_alice", "deal_found", "Deal found!", "Done") is None


@pytest.mark.unit
def test_list_is_newest_first_and_per_user(datastore):
    for day, title in ((1, "old"), (3, "new"), (2, "mid")):
        datastore.create("notifications", {
            "user_id": "user_alice",
            "type": "info",
            "title": title,
            "message": "",
            "created_at": datetime(2026, 1, day),
        })
    notify(datastore, "user_bob", "info", "other", "")

    titles = [n.title for n in list_notifications(datastore, "user_alice")]

    assert titles == ["new", "mid", "old"]


@pytest.mark.unit
def test_mark_read(datastore):
    notification = notify(datastore, "user_alice", "info", "Hi", "")

    updated = mark_notification_read(datastore, "user_alice", notification.id)

    assert updated.read_status is True


@pytest.mark.unit
def test_cannot_mark_someone_elses_notification(datastore):
    notification = notify(datastore, "user_alice", "info", "Hi", "")

    with pytest.raises(NotificationNotFoundException):
        mark_notification_read(datastore, "user_bob", notification.id)
