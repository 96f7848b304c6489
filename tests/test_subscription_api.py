"""
RenewalPro API - Session and Subscription Endpoint Tests
"""

import json

from renewalpro.domain import RoleAssignment
from tests.factories import ADMIN_ID, OWNER_ID, add_subscription, auth

BASE = "/api/v1"


class TestSession:
    """Profile, subscription and the route guard decision."""

    async def test_owner_session(self, client, db_session, owner):
        await add_subscription(db_session, subscription_tier="professional", entities_limit=25)

        response = await client.get(f"{BASE}/session", headers=auth(OWNER_ID))
        data = response.json()["data"]
        assert data["userId"] == OWNER_ID
        assert data["profile"]["email"] == "owner@example.com"
        assert data["subscription"]["subscriptionTier"] == "professional"
        assert data["isAdmin"] is False
        assert data["decision"] is None

    async def test_admin_page_redirects_owner_home(self, client, owner):
        response = await client.get(
            f"{BASE}/session", params={"path": "/admin-dashboard"}, headers=auth(OWNER_ID)
        )
        data = response.json()["data"]
        assert data["route"] == "/admin-dashboard"
        assert data["decision"] == "redirect"
        assert data["redirectTo"] == "/dashboard"

    async def test_admin_role_grant_renders_admin_page(self, client, db_session, owner):
        db_session.add(RoleAssignment(user_id=OWNER_ID, role="admin"))
        await db_session.commit()

        response = await client.get(
            f"{BASE}/session", params={"path": "/admin-audit"}, headers=auth(OWNER_ID)
        )
        data = response.json()["data"]
        assert data["isAdmin"] is True
        assert data["decision"] == "render"

    async def test_unprovisioned_user_is_loading(self, client, db_session):
        response = await client.get(
            f"{BASE}/session", params={"path": "/dashboard"}, headers=auth(ADMIN_ID)
        )
        data = response.json()["data"]
        assert data["profile"] is None
        assert data["decision"] == "loading"
        assert data["subscription"]["subscribed"] is False

    async def test_suspended_user_is_sent_to_login(self, client, db_session, owner):
        owner.account_status = "suspended"
        await db_session.commit()

        response = await client.get(
            f"{BASE}/session", params={"path": "/payments"}, headers=auth(OWNER_ID)
        )
        data = response.json()["data"]
        assert data["decision"] == "redirect_login"
        assert data["redirectTo"] == "/login"


class TestBilling:
    """Hosted checkout and billing portal sessions."""

    async def test_checkout_returns_provider_url(self, client, owner, platform):
        response = await client.post(
            f"{BASE}/subscription/checkout",
            json={"tier": "enterprise", "billingCycle": "yearly"},
            headers=auth(OWNER_ID),
        )
        assert response.status_code == 200
        assert response.json()["data"]["url"] == "https://checkout.test/session/cs_123"

        sent = json.loads(platform.calls[-1].content)
        assert sent == {
            "user_id": OWNER_ID,
            "email": "owner@example.com",
            "tier": "enterprise",
            "billing_cycle": "yearly",
        }

    async def test_unknown_tier(self, client, owner):
        response = await client.post(
            f"{BASE}/subscription/checkout", json={"tier": "platinum"}, headers=auth(OWNER_ID)
        )
        assert response.status_code == 422

    async def test_platform_outage(self, client, owner, platform):
        platform.fail = True
        response = await client.post(
            f"{BASE}/subscription/checkout", json={"tier": "starter"}, headers=auth(OWNER_ID)
        )
        assert response.status_code == 502
        assert response.json()["error"]["code"] == "PLATFORM_ERROR"

    async def test_portal(self, client, owner, platform):
        response = await client.post(f"{BASE}/subscription/portal", headers=auth(OWNER_ID))
        assert response.json()["data"]["url"] == "https://billing.test/portal/bps_123"
        assert json.loads(platform.calls[-1].content)["return_url"].endswith("/billing")

    async def test_no_subscription(self, client, owner):
        response = await client.get(f"{BASE}/subscription", headers=auth(OWNER_ID))
        data = response.json()["data"]
        assert data["subscribed"] is False
        assert data["subscriptionTier"] is None
