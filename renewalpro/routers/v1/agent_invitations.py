"""Agent invitation router: owner and agent sides of the invitation lifecycle."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.agent import (
    AgentInvitationCreate,
    AgentInvitationMetricsOut,
    AgentInvitationOut,
    AgentInvitationResponse,
    AssignmentOut,
)
from renewalpro.services.agent_invitation import AgentInvitationService

router = APIRouter(prefix="/agent-invitations", tags=["Agent Invitations"])


def _svc(session: AsyncSession, ctx: RequestContext) -> AgentInvitationService:
    return AgentInvitationService(session, ctx)


# ------------------------------------------------------------------
# Owner side
# ------------------------------------------------------------------

@router.get("", response_model=DataResponse[list[AgentInvitationOut]])
async def sent_invitations(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitations = await _svc(session, ctx).sent()
    return {"data": [AgentInvitationOut.model_validate(i) for i in invitations]}


@router.post("", response_model=DataResponse[AgentInvitationOut], status_code=status.HTTP_201_CREATED)
async def send_invitation(
    body: AgentInvitationCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitation = await _svc(session, ctx).send(body)
    return {"data": AgentInvitationOut.model_validate(invitation)}


@router.get("/metrics", response_model=DataResponse[AgentInvitationMetricsOut])
async def invitation_metrics(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await _svc(session, ctx).metrics()}


@router.post("/{invitation_id}/unsend", response_model=DataResponse[AgentInvitationOut])
async def unsend_invitation(
    invitation_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitation = await _svc(session, ctx).unsend(invitation_id)
    return {"data": AgentInvitationOut.model_validate(invitation)}


@router.get("/assignments", response_model=DataResponse[list[AssignmentOut]])
async def owner_assignments(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Agent assignments on the caller's entities."""
    assignments = await _svc(session, ctx).owner_assignments()
    return {"data": [AssignmentOut.model_validate(a) for a in assignments]}


@router.post("/assignments/{assignment_id}/terminate", response_model=DataResponse[AssignmentOut])
async def terminate_assignment(
    assignment_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    assignment = await _svc(session, ctx).terminate(assignment_id)
    return {"data": AssignmentOut.model_validate(assignment)}


# ------------------------------------------------------------------
# Agent side
# ------------------------------------------------------------------

@router.get("/received", response_model=DataResponse[list[AgentInvitationOut]])
async def received_invitations(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitations = await _svc(session, ctx).received()
    return {"data": [AgentInvitationOut.model_validate(i) for i in invitations]}


@router.get("/token/{token}", response_model=DataResponse[AgentInvitationOut])
async def invitation_by_token(
    token: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    invitation = await _svc(session, ctx).get_by_token(token)
    return {"data": AgentInvitationOut.model_validate(invitation)}


@router.post("/respond", response_model=DataResponse[AgentInvitationOut])
async def respond_to_invitation(
    body: AgentInvitationResponse,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Accept or decline; accepting opens an assignment at the agent's current price."""
    invitation = await _svc(session, ctx).respond(body)
    return {"data": AgentInvitationOut.model_validate(invitation)}


@router.get("/my-assignments", response_model=DataResponse[list[AssignmentOut]])
async def agent_assignments(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    assignments = await _svc(session, ctx).my_assignments()
    return {"data": [AssignmentOut.model_validate(a) for a in assignments]}
