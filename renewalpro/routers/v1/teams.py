"""Team router: teams, members and invitations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.team import (
    InvitationAccept,
    MemberRoleUpdate,
    MembershipOut,
    TeamCreate,
    TeamInvitationOut,
    TeamInviteCreate,
    TeamOut,
)
from renewalpro.services.team import TeamService

router = APIRouter(prefix="/teams", tags=["Teams"])


def _svc(session: AsyncSession, ctx: RequestContext) -> TeamService:
    return TeamService(session, ctx)


@router.get("", response_model=DataResponse[list[MembershipOut]])
async def my_teams(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Teams the caller belongs to, with the caller's role in each."""
    memberships = await _svc(session, ctx).my_memberships()
    return {"data": [MembershipOut.model_validate(m) for m in memberships]}


@router.post("", response_model=DataResponse[TeamOut], status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    team = await _svc(session, ctx).create_team(body)
    return {"data": TeamOut.model_validate(team)}


@router.get("/invitations", response_model=DataResponse[list[TeamInvitationOut]])
async def my_invitations(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Pending invitations addressed to the caller's email."""
    invitations = await _svc(session, ctx).my_invitations()
    return {"data": [TeamInvitationOut.model_validate(i) for i in invitations]}


@router.post("/invitations/accept", response_model=DataResponse[MembershipOut])
async def accept_invitation(
    body: InvitationAccept,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    membership = await _svc(session, ctx).accept_invitation(body)
    return {"data": MembershipOut.model_validate(membership)}


@router.get("/{team_id}", response_model=DataResponse[TeamOut])
async def get_team(
    team_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    team = await _svc(session, ctx).get_team(team_id)
    return {"data": TeamOut.model_validate(team)}


@router.get("/{team_id}/members", response_model=DataResponse[list[MembershipOut]])
async def list_members(
    team_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    members = await _svc(session, ctx).list_members(team_id)
    return {"data": [MembershipOut.model_validate(m) for m in members]}


@router.patch("/{team_id}/members/{member_id}", response_model=DataResponse[MembershipOut])
async def update_member_role(
    team_id: str,
    member_id: str,
    body: MemberRoleUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    member = await _svc(session, ctx).update_role(team_id, member_id, body)
    return {"data": MembershipOut.model_validate(member)}


@router.delete("/{team_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    team_id: str,
    member_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, ctx).remove_member(team_id, member_id)


@router.get("/{team_id}/invitations", response_model=DataResponse[list[TeamInvitationOut]])
async def list_team_invitations(
    team_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitations = await _svc(session, ctx).list_invitations(team_id)
    return {"data": [TeamInvitationOut.model_validate(i) for i in invitations]}


@router.post(
    "/{team_id}/invitations",
    response_model=DataResponse[TeamInvitationOut],
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    team_id: str,
    body: TeamInviteCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitation = await _svc(session, ctx).invite(team_id, body)
    return {"data": TeamInvitationOut.model_validate(invitation)}


@router.delete("/{team_id}/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_invitation(
    team_id: str,
    invitation_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, ctx).revoke_invitation(team_id, invitation_id)
