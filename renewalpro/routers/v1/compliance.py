"""Compliance router: compliance checks and entity officers."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.compliance import (
    CheckStatus,
    ComplianceCheckCreate,
    ComplianceCheckOut,
    ComplianceCheckUpdate,
    ComplianceSummaryOut,
    OfficerCreate,
    OfficerOut,
    OfficerUpdate,
)
from renewalpro.services.compliance import ComplianceService, OfficerService

router = APIRouter(prefix="/compliance-checks", tags=["Compliance"])
officers_router = APIRouter(tags=["Officers"])


@router.get("", response_model=DataResponse[list[ComplianceCheckOut]])
async def list_checks(
    entity_id: Optional[str] = Query(default=None),
    check_status: Optional[CheckStatus] = Query(default=None, alias="status"),
    q: Optional[str] = Query(default=None, description="Search name, type or notes"),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Owned checks, soonest due first; undated checks last."""
    checks = await ComplianceService(session, ctx).list_checks(entity_id, check_status, q)
    return {"data": [ComplianceCheckOut.model_validate(c) for c in checks]}


@router.get("/summary", response_model=DataResponse[ComplianceSummaryOut])
async def check_summary(
    entity_id: Optional[str] = Query(default=None),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    summary = await ComplianceService(session, ctx).summary(entity_id)
    return {"data": ComplianceSummaryOut.model_validate(summary)}


@router.post("", response_model=DataResponse[ComplianceCheckOut], status_code=status.HTTP_201_CREATED)
async def create_check(
    body: ComplianceCheckCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    check = await ComplianceService(session, ctx).create_check(body)
    return {"data": ComplianceCheckOut.model_validate(check)}


@router.put("/{check_id}", response_model=DataResponse[ComplianceCheckOut])
async def update_check(
    check_id: str,
    body: ComplianceCheckUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    check = await ComplianceService(session, ctx).update_check(check_id, body)
    return {"data": ComplianceCheckOut.model_validate(check)}


@router.delete("/{check_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_check(
    check_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await ComplianceService(session, ctx).delete_check(check_id)


# ---------------------------------------------------------------------------
# Officers
# ---------------------------------------------------------------------------


@officers_router.get("/entities/{entity_id}/officers", response_model=DataResponse[list[OfficerOut]])
async def list_officers(
    entity_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    officers = await OfficerService(session, ctx).list_for_entity(entity_id)
    return {"data": [OfficerOut.model_validate(o) for o in officers]}


@officers_router.post(
    "/entities/{entity_id}/officers",
    response_model=DataResponse[OfficerOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_officer(
    entity_id: str,
    body: OfficerCreate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    officer = await OfficerService(session, ctx).create_officer(entity_id, body)
    return {"data": OfficerOut.model_validate(officer)}


@officers_router.put("/officers/{officer_id}", response_model=DataResponse[OfficerOut])
async def update_officer(
    officer_id: str,
    body: OfficerUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    officer = await OfficerService(session, ctx).update_officer(officer_id, body)
    return {"data": OfficerOut.model_validate(officer)}


@officers_router.delete("/officers/{officer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_officer(
    officer_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await OfficerService(session, ctx).delete_officer(officer_id)
