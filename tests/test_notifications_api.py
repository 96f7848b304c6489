"""
RenewalPro API - Notification Endpoint Tests
"""

from sqlalchemy import func, select

from renewalpro.domain import Notification, NotificationPreferences
from tests.factories import ADMIN_ID, OTHER_ID, OWNER_ID, auth

BASE = "/api/v1/notifications"


async def add_notification(session, user_id=OWNER_ID, **overrides):
    values = {
        "user_id": user_id,
        "title": "Annual report due",
        "message": "Acme Holdings LLC is due on March 1.",
        "type": "payment_due",
    }
    values.update(overrides)
    notification = Notification(**values)
    session.add(notification)
    await session.commit()
    return notification


async def unread(client, user_id=OWNER_ID) -> int:
    response = await client.get(f"{BASE}/unread-count", headers=auth(user_id))
    return response.json()["data"]["count"]


class TestNotifications:
    async def test_marking_read_drops_unread_count(self, client, db_session, owner):
        first = await add_notification(db_session)
        await add_notification(db_session, title="Renewal reminder", type="renewal_reminder")
        await add_notification(db_session, user_id=OTHER_ID)

        assert await unread(client) == 2

        response = await client.post(f"{BASE}/{first.id}/read", headers=auth(OWNER_ID))
        assert response.status_code == 200
        assert response.json()["data"]["read"] is True
        assert await unread(client) == 1

        response = await client.get(BASE, params={"unread": "true"}, headers=auth(OWNER_ID))
        assert [n["title"] for n in response.json()["data"]] == ["Renewal reminder"]

    async def test_mark_all_read(self, client, db_session, owner):
        await add_notification(db_session)
        await add_notification(db_session)
        await add_notification(db_session, read=True)

        response = await client.post(f"{BASE}/read-all", headers=auth(OWNER_ID))
        assert response.json()["data"]["count"] == 2
        assert await unread(client) == 0

    async def test_delete(self, client, db_session, owner):
        notification = await add_notification(db_session)

        response = await client.delete(f"{BASE}/{notification.id}", headers=auth(OWNER_ID))
        assert response.status_code == 204
        response = await client.get(BASE, headers=auth(OWNER_ID))
        assert response.json()["data"] == []

    async def test_cannot_touch_another_users_notification(self, client, db_session, owner):
        notification = await add_notification(db_session, user_id=OTHER_ID)
        response = await client.post(f"{BASE}/{notification.id}/read", headers=auth(OWNER_ID))
        assert response.status_code == 404


class TestSendNotification:
    """Only admins can queue notifications for other users."""

    async def test_owner_cannot_send(self, client, owner):
        body = {"userId": OTHER_ID, "title": "Hi", "message": "Hello"}
        response = await client.post(BASE, json=body, headers=auth(OWNER_ID))
        assert response.status_code == 403

    async def test_admin_sends_to_user(self, client, owner, admin):
        body = {
            "userId": OWNER_ID,
            "type": "compliance_check",
            "title": "Compliance check",
            "message": "Please review your entities.",
        }
        response = await client.post(BASE, json=body, headers=auth(ADMIN_ID))
        assert response.status_code == 201
        assert response.json()["data"]["read"] is False

        assert await unread(client) == 1
        assert await unread(client, ADMIN_ID) == 0


class TestNotificationPreferences:
    async def test_defaults_created_once(self, client, db_session, owner):
        first = await client.get(f"{BASE}/preferences", headers=auth(OWNER_ID))
        second = await client.get(f"{BASE}/preferences", headers=auth(OWNER_ID))

        data = first.json()["data"]
        assert data["emailNotifications"] is True
        assert data["reminderDaysBefore"] == [30, 14, 7, 1]
        assert data["notificationTypes"] == ["renewal_reminder", "payment_due", "compliance_check"]
        assert second.json()["data"] == data

        rows = await db_session.execute(select(func.count()).select_from(NotificationPreferences))
        assert rows.scalar_one() == 1

    async def test_update_sorts_reminder_days(self, client, owner):
        body = {"reminderDaysBefore": [7, 60, 7, 3], "emailNotifications": False}

        response = await client.put(f"{BASE}/preferences", json=body, headers=auth(OWNER_ID))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["reminderDaysBefore"] == [60, 7, 3]
        assert data["emailNotifications"] is False
        assert data["notificationTypes"] == ["renewal_reminder", "payment_due", "compliance_check"]

        response = await client.get(f"{BASE}/preferences", headers=auth(OWNER_ID))
        assert response.json()["data"]["reminderDaysBefore"] == [60, 7, 3]

    async def test_preferences_are_per_user(self, client, owner, other_owner):
        body = {"notificationTypes": ["payment_due"]}
        await client.put(f"{BASE}/preferences", json=body, headers=auth(OWNER_ID))

        response = await client.get(f"{BASE}/preferences", headers=auth(OTHER_ID))
        assert len(response.json()["data"]["notificationTypes"]) == 3

    async def test_invalid_values_are_rejected(self, client, owner):
        for body in ({"reminderDaysBefore": [0]}, {"notificationTypes": ["weekly_digest"]}):
            response = await client.put(f"{BASE}/preferences", json=body, headers=auth(OWNER_ID))
            assert response.status_code == 422
