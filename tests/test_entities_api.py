"""
RenewalPro API - Entity and Owner Dashboard Endpoint Tests
"""

from datetime import date

from renewalpro.domain import Team, TeamMembership
from renewalpro.domain.mixins import utc_today
from tests.factories import OTHER_ID, OWNER_ID, add_entity, add_payment, add_subscription, auth

BASE = "/api/v1/entities"


class TestEntityCrud:
    """Create, read, update and delete through the API."""

    async def test_requires_user_header(self, client):
        response = await client.get(BASE)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_create_delaware_corp(self, client, owner):
        body = {
            "name": "Acme Corp",
            "type": "c_corp",
            "state": "de",
            "formationDate": "2021-01-15",
            "independentDirectorFee": 2500,
        }
        response = await client.post(BASE, json=body, headers=auth(OWNER_ID))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["state"] == "DE"
        assert data["userId"] == OWNER_ID
        assert data["status"] == "active"
        assert data["annualFee"] == 175
        assert data["directorRequired"] is True

    async def test_create_rejects_bad_state(self, client, owner):
        body = {"name": "Acme", "type": "llc", "state": "Delaware", "formationDate": "2021-01-15"}
        response = await client.post(BASE, json=body, headers=auth(OWNER_ID))
        assert response.status_code == 422

    async def test_create_rejects_future_formation(self, client, owner):
        body = {
            "name": "Acme",
            "type": "llc",
            "state": "NY",
            "formationDate": date(utc_today().year + 1, 1, 1).isoformat(),
        }
        response = await client.post(BASE, json=body, headers=auth(OWNER_ID))
        assert response.status_code == 422

    async def test_list_is_owner_scoped_and_searchable(self, client, db_session, owner):
        await add_entity(db_session, name="Acme Holdings LLC", state="DE")
        await add_entity(db_session, name="Beta Ventures", state="CA", type="c_corp")
        await add_entity(db_session, user_id=OTHER_ID, name="Somebody Else LLC")

        response = await client.get(BASE, headers=auth(OWNER_ID))
        body = response.json()
        assert body["meta"]["total"] == 2

        response = await client.get(BASE, params={"q": "de"}, headers=auth(OWNER_ID))
        names = [e["name"] for e in response.json()["data"]]
        assert names == ["Acme Holdings LLC"]

    async def test_list_paginates_after_search(self, client, db_session, owner):
        for i in range(3):
            await add_entity(db_session, name=f"Acme {i}")

        response = await client.get(BASE, params={"limit": 2, "page": 2}, headers=auth(OWNER_ID))
        body = response.json()
        assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}
        assert len(body["data"]) == 1

    async def test_cannot_read_another_owners_entity(self, client, db_session, owner):
        entity = await add_entity(db_session, user_id=OTHER_ID)
        response = await client.get(f"{BASE}/{entity.id}", headers=auth(OWNER_ID))
        assert response.status_code == 404

    async def test_update_and_delete(self, client, db_session, owner):
        entity = await add_entity(db_session)

        response = await client.put(
            f"{BASE}/{entity.id}",
            json={"name": "Acme Renamed", "registeredAgentFee": 150},
            headers=auth(OWNER_ID),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Acme Renamed"
        assert data["registeredAgentFee"] == 150
        assert data["type"] == "llc"

        response = await client.delete(f"{BASE}/{entity.id}", headers=auth(OWNER_ID))
        assert response.status_code == 204
        response = await client.get(f"{BASE}/{entity.id}", headers=auth(OWNER_ID))
        assert response.status_code == 404


class TestEntityLimits:
    """Tier entity limits."""

    async def test_limits_default_to_starter(self, client, db_session, owner):
        for _ in range(4):
            await add_entity(db_session)

        response = await client.get(f"{BASE}/limits", headers=auth(OWNER_ID))
        data = response.json()["data"]
        assert data["currentEntities"] == 4
        assert data["maxEntities"] == 5
        assert data["percentageUsed"] == 80.0
        assert data["isNearLimit"] is True
        assert data["canAddMore"] is True
        assert data["nextTier"] == "professional"
        assert data["nextTierPrice"] == 99

    async def test_create_at_limit_is_rejected(self, client, db_session, owner):
        await add_subscription(db_session, entities_limit=1)
        await add_entity(db_session)

        body = {"name": "Second", "type": "llc", "state": "NY", "formationDate": "2022-02-02"}
        response = await client.post(BASE, json=body, headers=auth(OWNER_ID))

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "ENTITY_LIMIT_REACHED"
        assert "1/1" in error["message"]

    async def test_unlimited_tier(self, client, db_session, owner):
        await add_subscription(db_session, subscription_tier="unlimited", entities_limit=None)
        response = await client.get(f"{BASE}/limits", headers=auth(OWNER_ID))
        data = response.json()["data"]
        assert data["maxEntities"] is None
        assert data["isAtLimit"] is False
        assert data["nextTier"] is None


class TestFormHints:
    async def test_delaware_s_corp(self, client, owner):
        response = await client.get(
            f"{BASE}/form-hints", params={"state": "de", "type": "s_corp"}, headers=auth(OWNER_ID)
        )
        data = response.json()["data"]
        assert data == {
            "state": "DE",
            "type": "s_corp",
            "stateName": "Delaware",
            "annualFee": 175,
            "directorRequired": True,
        }

    async def test_unknown_state_costs_nothing(self, client, owner):
        response = await client.get(
            f"{BASE}/form-hints", params={"state": "WY", "type": "llc"}, headers=auth(OWNER_ID)
        )
        data = response.json()["data"]
        assert data["annualFee"] == 0
        assert data["stateName"] is None
        assert data["directorRequired"] is False


class TestTeamScope:
    """Entities shared with a team through X-Team-Id."""

    async def test_member_sees_team_entities(self, client, db_session, owner, other_owner):
        team = Team(name="Ops", created_by=OTHER_ID)
        db_session.add(team)
        await db_session.flush()
        db_session.add(TeamMembership(team_id=team.id, user_id=OTHER_ID, role="owner"))
        db_session.add(TeamMembership(team_id=team.id, user_id=OWNER_ID, role="member"))
        await db_session.commit()
        await add_entity(db_session, user_id=OTHER_ID, name="Shared Co", team_id=team.id)
        await add_entity(db_session, user_id=OTHER_ID, name="Private Co")

        response = await client.get(BASE, headers=auth(OWNER_ID, team.id))
        assert [e["name"] for e in response.json()["data"]] == ["Shared Co"]

    async def test_non_member_is_forbidden(self, client, db_session, owner):
        team = Team(name="Ops", created_by=OTHER_ID)
        db_session.add(team)
        await db_session.commit()

        response = await client.get(BASE, headers=auth(OWNER_ID, team.id))
        assert response.status_code == 403


class TestOwnerDashboard:
    """Fee metrics and the fee schedule."""

    async def test_metrics(self, client, db_session, owner):
        await add_entity(db_session, state="DE", type="llc", registered_agent_fee=100)
        await add_entity(db_session, state="CA", type="c_corp")
        await add_payment(db_session, amount=300, status="pending")
        await add_payment(db_session, amount=50, status="paid")

        response = await client.get("/api/v1/dashboard/metrics", headers=auth(OWNER_ID))
        data = response.json()["data"]
        assert data["totalEntities"] == 2
        assert data["delawareEntities"] == 1
        assert data["annualEntityFees"] == 325
        assert data["annualServiceFees"] == 100
        assert data["pendingPayments"] == 300
        assert data["avgEntityFee"] == 162

    async def test_schedule_director_column(self, client, db_session, owner):
        await add_entity(db_session, type="c_corp", independent_director_fee=2500)

        response = await client.get(
            "/api/v1/dashboard/schedule",
            params={"year": 2026, "director_month": 6},
            headers=auth(OWNER_ID),
        )
        data = response.json()["data"]
        assert data["year"] == 2026
        assert data["months"][0] == "Jan"

        director = [i for i in data["lineItems"] if i["kind"] == "independent_director"]
        assert len(director) == 1
        assert director[0]["total"] == 2500
        assert data["monthTotals"][5] == 2500
        assert data["grandTotal"] == 2675
