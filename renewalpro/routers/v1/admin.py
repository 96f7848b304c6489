"""Admin router. Every endpoint re-checks admin access on the server."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.pagination import PaginationParams
from renewalpro.core.response import DataResponse, ListResponse, paginate_filtered
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, require_admin
from renewalpro.schemas.admin import (
    AccountStatusUpdate,
    AdminDashboardOut,
    AdminUserOut,
    AgentAnalyticsOut,
    AuditEntryOut,
    AuditStatsOut,
    ComplianceReportOut,
    ComplianceReportRequest,
    EntityAnalyticsOut,
    FinancialAnalyticsOut,
    RoleAssignmentOut,
    RoleAssignRequest,
    SystemStatsOut,
    UserAnalyticsOut,
)
from renewalpro.schemas.agent import AgentAvailabilityUpdate, AgentOut
from renewalpro.schemas.entity import EntityOut, EntityUpdate
from renewalpro.services.admin import AdminService, get_admin_cache
from renewalpro.services.cache import CacheRegistry
from renewalpro.services.platform import PlatformClient, get_platform

router = APIRouter(prefix="/admin", tags=["Admin"])


async def _svc(
    ctx: RequestContext = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    platform: PlatformClient = Depends(get_platform),
    cache: CacheRegistry = Depends(get_admin_cache),
) -> AdminService:
    return AdminService(session, ctx, platform, cache)


# ------------------------------------------------------------------
# Dashboard & analytics
# ------------------------------------------------------------------

@router.get("/dashboard", response_model=DataResponse[AdminDashboardOut])
async def admin_dashboard(svc: AdminService = Depends(_svc)):
    """All dashboard slices; slices that failed to load are listed in ``failedSections``."""
    return {"data": await svc.dashboard()}


@router.get("/analytics/users", response_model=DataResponse[UserAnalyticsOut])
async def user_analytics(svc: AdminService = Depends(_svc)):
    return {"data": await svc.user_analytics()}


@router.get("/analytics/entities", response_model=DataResponse[EntityAnalyticsOut])
async def entity_analytics(svc: AdminService = Depends(_svc)):
    return {"data": await svc.entity_analytics()}


@router.get("/analytics/financial", response_model=DataResponse[FinancialAnalyticsOut])
async def financial_analytics(svc: AdminService = Depends(_svc)):
    return {"data": await svc.financial_analytics()}


@router.get("/analytics/system", response_model=DataResponse[SystemStatsOut])
async def system_stats(svc: AdminService = Depends(_svc)):
    return {"data": await svc.system_stats()}


@router.get("/analytics/agents", response_model=DataResponse[AgentAnalyticsOut])
async def agent_analytics(svc: AdminService = Depends(_svc)):
    return {"data": await svc.agent_analytics()}


# ------------------------------------------------------------------
# Users & roles
# ------------------------------------------------------------------

@router.get("/users", response_model=ListResponse[AdminUserOut])
async def list_users(
    q: Optional[str] = Query(default=None),
    account_status: Optional[str] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    svc: AdminService = Depends(_svc),
):
    users = await svc.list_users(q, account_status)
    return paginate_filtered([AdminUserOut.model_validate(u) for u in users], pagination)


@router.patch("/users/{user_id}/status", response_model=DataResponse[AdminUserOut])
async def set_account_status(
    user_id: str,
    body: AccountStatusUpdate,
    svc: AdminService = Depends(_svc),
):
    return {"data": AdminUserOut.model_validate(await svc.set_account_status(user_id, body))}


@router.get("/roles", response_model=DataResponse[list[RoleAssignmentOut]])
async def list_roles(svc: AdminService = Depends(_svc)):
    return {"data": await svc.list_roles()}


@router.post("/roles", response_model=DataResponse[RoleAssignmentOut], status_code=status.HTTP_201_CREATED)
async def assign_role(body: RoleAssignRequest, svc: AdminService = Depends(_svc)):
    return {"data": await svc.assign_role(body)}


@router.delete("/roles/{user_id}/{role}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_role(user_id: str, role: str, svc: AdminService = Depends(_svc)):
    await svc.remove_role(user_id, role)


# ------------------------------------------------------------------
# Entities & agents
# ------------------------------------------------------------------

@router.get("/entities", response_model=ListResponse[EntityOut])
async def list_entities(
    q: Optional[str] = Query(default=None),
    pagination: PaginationParams = Depends(),
    svc: AdminService = Depends(_svc),
):
    entities = await svc.list_entities(q)
    return paginate_filtered([EntityOut.model_validate(e) for e in entities], pagination)


@router.put("/entities/{entity_id}", response_model=DataResponse[EntityOut])
async def update_entity(entity_id: str, body: EntityUpdate, svc: AdminService = Depends(_svc)):
    return {"data": EntityOut.model_validate(await svc.update_entity(entity_id, body))}


@router.delete("/entities/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(entity_id: str, svc: AdminService = Depends(_svc)):
    await svc.delete_entity(entity_id)


@router.get("/agents", response_model=ListResponse[AgentOut])
async def list_agents(
    q: Optional[str] = Query(default=None),
    refresh: bool = Query(default=False, description="Bypass the cached listing"),
    pagination: PaginationParams = Depends(),
    svc: AdminService = Depends(_svc),
):
    return paginate_filtered(await svc.list_agents(q, refresh), pagination)


@router.patch("/agents/{agent_id}/availability", response_model=DataResponse[AgentOut])
async def set_agent_availability(
    agent_id: str,
    body: AgentAvailabilityUpdate,
    svc: AdminService = Depends(_svc),
):
    return {"data": await svc.set_agent_availability(agent_id, body.is_available)}


# ------------------------------------------------------------------
# Audit log & reports
# ------------------------------------------------------------------

@router.get("/audit-log", response_model=DataResponse[list[AuditEntryOut]])
async def audit_log(
    q: Optional[str] = Query(default=None, description="Search action, description and metadata"),
    entity_type: Optional[str] = Query(default=None),
    days: Optional[int] = Query(default=None, ge=1, le=365),
    limit: int = Query(default=100, ge=1, le=500),
    svc: AdminService = Depends(_svc),
):
    entries = await svc.audit_log(q, entity_type=entity_type, days=days, limit=limit)
    return {"data": [AuditEntryOut.model_validate(e) for e in entries]}


@router.get("/audit-log/stats", response_model=DataResponse[AuditStatsOut])
async def audit_stats(
    days: int = Query(default=30, ge=1, le=365),
    svc: AdminService = Depends(_svc),
):
    return {"data": await svc.audit_stats(days)}


@router.post("/reports/compliance", response_model=DataResponse[ComplianceReportOut])
async def compliance_report(
    body: ComplianceReportRequest,
    svc: AdminService = Depends(_svc),
):
    return {"data": await svc.compliance_report(body)}

