"""Registered-agent router: public directory and the caller's agent profile."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.pagination import PaginationParams
from renewalpro.core.response import DataResponse, ListResponse, paginate_filtered
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.agent import (
    AgentAvailabilityUpdate,
    AgentDirectoryOut,
    AgentOut,
    AgentProfileCreate,
    AgentProfileUpdate,
)
from renewalpro.services.admin import get_admin_cache
from renewalpro.services.agent import AgentService
from renewalpro.services.cache import CacheRegistry

router = APIRouter(prefix="/agents", tags=["Agents"])


def _svc(
    session: AsyncSession, ctx: RequestContext, cache: CacheRegistry | None = None
) -> AgentService:
    return AgentService(session, ctx, cache)


@router.get("", response_model=ListResponse[AgentDirectoryOut])
async def agent_directory(
    state: Optional[str] = Query(default=None, min_length=2, max_length=2),
    max_price: Optional[float] = Query(default=None, ge=0),
    min_experience: Optional[int] = Query(default=None, ge=0),
    available_only: bool = Query(default=True),
    pagination: PaginationParams = Depends(),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Browse agents. Contact details and pricing are not part of the directory card."""
    agents = await _svc(session, ctx).directory(
        state=state,
        max_price=max_price,
        min_experience=min_experience,
        available_only=available_only,
    )
    return paginate_filtered([AgentDirectoryOut.model_validate(a) for a in agents], pagination)


@router.get("/me", response_model=DataResponse[AgentOut])
async def my_agent_profile(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    return {"data": AgentOut.model_validate(await _svc(session, ctx).my_profile())}


@router.post("/me", response_model=DataResponse[AgentOut], status_code=status.HTTP_201_CREATED)
async def create_agent_profile(
    body: AgentProfileCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    cache: CacheRegistry = Depends(get_admin_cache),
):
    agent = await _svc(session, ctx, cache).create_profile(body)
    return {"data": AgentOut.model_validate(agent)}


@router.put("/me", response_model=DataResponse[AgentOut])
async def update_agent_profile(
    body: AgentProfileUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    cache: CacheRegistry = Depends(get_admin_cache),
):
    agent = await _svc(session, ctx, cache).update_profile(body)
    return {"data": AgentOut.model_validate(agent)}


@router.patch("/me/availability", response_model=DataResponse[AgentOut])
async def set_availability(
    body: AgentAvailabilityUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    cache: CacheRegistry = Depends(get_admin_cache),
):
    agent = await _svc(session, ctx, cache).set_availability(body.is_available)
    return {"data": AgentOut.model_validate(agent)}


@router.get("/{agent_id}", response_model=DataResponse[AgentDirectoryOut])
async def get_agent(
    agent_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    agent = await _svc(session, ctx).get_agent(agent_id)
    return {"data": AgentDirectoryOut.model_validate(agent)}
