"""
RenewalPro API - Team Endpoint Tests

Team creation, member roles and the email invitation flow.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError

from renewalpro.domain import Team, TeamInvitation
from tests.factories import OTHER_ID, OWNER_ID, auth

BASE = "/api/v1/teams"


async def create_team(client, name="Compliance Ops") -> dict:
    response = await client.post(BASE, json={"name": name}, headers=auth(OWNER_ID))
    assert response.status_code == 201
    return response.json()["data"]


async def invite(client, team_id, email="other@example.com", role="member"):
    return await client.post(
        f"{BASE}/{team_id}/invitations",
        json={"email": email, "role": role},
        headers=auth(OWNER_ID),
    )


class TestTeams:
    async def test_creator_becomes_owner(self, client, owner):
        team = await create_team(client)
        assert team["createdBy"] == OWNER_ID

        response = await client.get(BASE, headers=auth(OWNER_ID))
        memberships = response.json()["data"]
        assert len(memberships) == 1
        assert memberships[0]["role"] == "owner"
        assert memberships[0]["team"]["name"] == "Compliance Ops"

    async def test_non_member_cannot_see_team(self, client, owner, other_owner):
        team = await create_team(client)
        response = await client.get(f"{BASE}/{team['id']}", headers=auth(OTHER_ID))
        assert response.status_code == 404

    async def test_memberships_are_never_lazy_loaded(self, client, db_session, owner):
        created = await create_team(client)
        team = (await db_session.execute(select(Team).where(Team.id == created["id"]))).scalar_one()

        with pytest.raises(InvalidRequestError):
            _ = team.memberships


class TestInvitations:
    """Invite by email, accept by token."""

    async def test_invite_and_accept(self, client, owner, other_owner):
        team = await create_team(client)

        response = await invite(client, team["id"], email="Other@Example.com", role="manager")
        assert response.status_code == 201
        invitation = response.json()["data"]
        assert invitation["email"] == "other@example.com"

        response = await client.get(f"{BASE}/invitations", headers=auth(OTHER_ID))
        assert [i["id"] for i in response.json()["data"]] == [invitation["id"]]

        response = await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )
        assert response.status_code == 200
        membership = response.json()["data"]
        assert membership["role"] == "manager"
        assert membership["team"]["id"] == team["id"]

        response = await client.get(f"{BASE}/{team['id']}/members", headers=auth(OTHER_ID))
        assert {m["userId"] for m in response.json()["data"]} == {OWNER_ID, OTHER_ID}

        # a used token cannot be replayed
        response = await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )
        assert response.status_code == 404

    async def test_duplicate_pending_invitation(self, client, owner):
        team = await create_team(client)
        assert (await invite(client, team["id"])).status_code == 201
        response = await invite(client, team["id"], email="OTHER@example.com")
        assert response.status_code == 409

    async def test_wrong_email_cannot_accept(self, client, owner, other_owner):
        team = await create_team(client)
        invitation = (await invite(client, team["id"], email="someone@example.com")).json()["data"]

        response = await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )
        assert response.status_code == 403

    async def test_expired_invitation(self, client, db_session, owner, other_owner):
        team = await create_team(client)
        invitation = (await invite(client, team["id"])).json()["data"]

        row = (await db_session.execute(
            select(TeamInvitation).where(TeamInvitation.id == invitation["id"])
        )).scalar_one()
        row.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
        await db_session.commit()

        response = await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )
        assert response.status_code == 422

    async def test_only_managers_invite(self, client, owner, other_owner):
        team = await create_team(client)
        invitation = (await invite(client, team["id"])).json()["data"]
        await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )

        response = await client.post(
            f"{BASE}/{team['id']}/invitations",
            json={"email": "third@example.com"},
            headers=auth(OTHER_ID),
        )
        assert response.status_code == 403

    async def test_revoke(self, client, owner):
        team = await create_team(client)
        invitation = (await invite(client, team["id"])).json()["data"]

        response = await client.delete(
            f"{BASE}/{team['id']}/invitations/{invitation['id']}", headers=auth(OWNER_ID)
        )
        assert response.status_code == 204
        response = await client.get(f"{BASE}/{team['id']}/invitations", headers=auth(OWNER_ID))
        assert response.json()["data"] == []


class TestMembers:
    """Role changes and removal."""

    async def _join(self, client):
        team = await create_team(client)
        invitation = (await invite(client, team["id"])).json()["data"]
        response = await client.post(
            f"{BASE}/invitations/accept",
            json={"token": invitation["token"]},
            headers=auth(OTHER_ID),
        )
        return team, response.json()["data"]

    async def test_owner_changes_member_role(self, client, owner, other_owner):
        team, member = await self._join(client)

        response = await client.patch(
            f"{BASE}/{team['id']}/members/{member['id']}",
            json={"role": "admin"},
            headers=auth(OWNER_ID),
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"

    async def test_owner_role_is_fixed(self, client, owner, other_owner):
        team, _ = await self._join(client)
        members = (await client.get(
            f"{BASE}/{team['id']}/members", headers=auth(OWNER_ID)
        )).json()["data"]
        owner_row = next(m for m in members if m["role"] == "owner")

        response = await client.patch(
            f"{BASE}/{team['id']}/members/{owner_row['id']}",
            json={"role": "member"},
            headers=auth(OWNER_ID),
        )
        assert response.status_code == 403

        response = await client.delete(
            f"{BASE}/{team['id']}/members/{owner_row['id']}", headers=auth(OWNER_ID)
        )
        assert response.status_code == 403

    async def test_member_can_leave(self, client, owner, other_owner):
        team, member = await self._join(client)

        response = await client.delete(
            f"{BASE}/{team['id']}/members/{member['id']}", headers=auth(OTHER_ID)
        )
        assert response.status_code == 204

        response = await client.get(BASE, headers=auth(OTHER_ID))
        assert response.json()["data"] == []
