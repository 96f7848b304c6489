"""Entity router: the owner's entity portfolio."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.pagination import PaginationParams
from renewalpro.core.response import DataResponse, ListResponse, paginate_filtered
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.domain.entity import EntityType
from renewalpro.schemas.entity import (
    EntityCreate,
    EntityFormHints,
    EntityLimitsOut,
    EntityOut,
    EntityUpdate,
)
from renewalpro.services.entity import EntityService

router = APIRouter(prefix="/entities", tags=["Entities"])


def _svc(session: AsyncSession, ctx: RequestContext) -> EntityService:
    return EntityService(session, ctx)


@router.get("", response_model=ListResponse[EntityOut])
async def list_entities(
    q: Optional[str] = Query(default=None, description="Search name, state or type"),
    pagination: PaginationParams = Depends(),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """List owned entities, plus the selected team's shared entities (X-Team-Id)."""
    items = await _svc(session, ctx).list_entities(q)
    return paginate_filtered([EntityOut.model_validate(e) for e in items], pagination)


@router.get("/form-hints", response_model=DataResponse[EntityFormHints])
async def form_hints(
    state: str = Query(min_length=2, max_length=2),
    entity_type: EntityType = Query(alias="type"),
    ctx: RequestContext = Depends(get_context),
):
    """Annual fee and independent-director requirement for a state/type pair."""
    return {"data": EntityFormHints.build(state, entity_type.value)}


@router.get("/limits", response_model=DataResponse[EntityLimitsOut])
async def entity_limits(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await _svc(session, ctx).limits()}


@router.post("", response_model=DataResponse[EntityOut], status_code=status.HTTP_201_CREATED)
async def create_entity(
    body: EntityCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    entity = await _svc(session, ctx).create_entity(body)
    return {"data": EntityOut.model_validate(entity)}


@router.get("/{entity_id}", response_model=DataResponse[EntityOut])
async def get_entity(
    entity_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    entity = await _svc(session, ctx).get_entity(entity_id)
    return {"data": EntityOut.model_validate(entity)}


@router.put("/{entity_id}", response_model=DataResponse[EntityOut])
async def update_entity(
    entity_id: str,
    body: EntityUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    entity = await _svc(session, ctx).update_entity(entity_id, body)
    return {"data": EntityOut.model_validate(entity)}


@router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(
    entity_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, ctx).delete_entity(entity_id)
