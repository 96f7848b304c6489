"""Admin service: platform-wide dashboard, analytics, user/role management and reports.

Every method here is unscoped (reads and writes all tenants' rows); the
routers only reach it through ``require_admin``.  Administrative mutations
write an audit event through ``AuditRepository``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.config import settings
from renewalpro.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PlatformError,
)
from renewalpro.dependencies import RequestContext
from renewalpro.domain.agent import Agent
from renewalpro.domain.audit import AuditTrail
from renewalpro.domain.entity import Entity
from renewalpro.domain.mixins import as_utc
from renewalpro.domain.profile import Profile
from renewalpro.repositories.agent import (
    AgentInvitationRepository,
    AgentRepository,
    AssignmentRepository,
)
from renewalpro.repositories.analytics import AnalyticsRepository
from renewalpro.repositories.audit import AuditRepository
from renewalpro.repositories.entity import EntityRepository
from renewalpro.repositories.payment import InvoiceRepository, PaymentRepository
from renewalpro.repositories.profile import ProfileRepository, RoleAssignmentRepository
from renewalpro.schemas.admin import (
    AccountStatusUpdate,
    AdminDashboardOut,
    AgentAnalyticsOut,
    AuditStatsOut,
    ComplianceReportOut,
    ComplianceReportRequest,
    CountItem,
    EntityAnalyticsOut,
    FinancialAnalyticsOut,
    RoleAssignmentOut,
    RoleAssignRequest,
    SystemStatsOut,
    UserAnalyticsOut,
)
from renewalpro.schemas.agent import AgentOut
from renewalpro.schemas.entity import EntityUpdate
from renewalpro.services import metrics
from renewalpro.services.cache import CacheRegistry, RecordCache
from renewalpro.services.fees import dashboard_fee_metrics
from renewalpro.services.platform import PlatformClient

logger = logging.getLogger(__name__)

USER_SEARCH_FIELDS = ("email", "first_name", "last_name", "company", "user_id")
ENTITY_SEARCH_FIELDS = ("name", "state", "type", "user_id")
AGENT_SEARCH_FIELDS = ("company_name", "contact_email", "states")
AUDIT_SEARCH_FIELDS = ("action", "description", "event_metadata", "entity_type")
UNKNOWN_EMAIL = "Unknown"

_admin_cache = CacheRegistry(settings.redis_url, settings.cache_ttl_seconds)


def get_admin_cache() -> CacheRegistry:
    """FastAPI dependency for the shared admin record cache."""
    return _admin_cache


def _money(row: dict[str, Any], key: str):
    return metrics.to_major_units(row.get(key))


def _count_items(pairs: list[tuple[str, int]]) -> list[CountItem]:
    return [CountItem(key=key, count=count) for key, count in pairs]


class AdminService:
    def __init__(
        self,
        session: AsyncSession,
        ctx: RequestContext,
        platform: PlatformClient | None = None,
        cache: CacheRegistry | None = None,
    ):
        self._session = session
        self._ctx = ctx
        self._platform = platform
        self._cache = cache or _admin_cache
        self._analytics = AnalyticsRepository(session)
        self._profiles = ProfileRepository(session)
        self._roles = RoleAssignmentRepository(session)
        self._entities = EntityRepository(session)
        self._agents = AgentRepository(session)
        self._audit = AuditRepository(session)

    async def _record(self, action: str, entity_type: str, **kwargs: Any) -> AuditTrail:
        return await self._audit.record(
            actor_id=self._ctx.user_id, action=action, entity_type=entity_type, **kwargs
        )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def _load_slices(
        self, loaders: dict[str, Callable[[], Awaitable[Any]]]
    ) -> tuple[dict[str, Any], list[str]]:
        """Run each loader in its own SAVEPOINT; a failed slice comes back as ``None``.

        Cancellation is not caught: the remaining slices never start and the
        request's session rolls back.
        """
        results: dict[str, Any] = {}
        failed: list[str] = []
        for name, load in loaders.items():
            try:
                async with self._session.begin_nested():
                    results[name] = await load()
            except Exception:
                logger.exception("Admin dashboard slice '%s' failed", name)
                results[name] = None
                failed.append(name)
        return results, failed

    async def dashboard(self, now: datetime | None = None) -> AdminDashboardOut:
        now = now or datetime.now(timezone.utc)
        data, failed = await self._load_slices({
            "users": self._profiles.list_all,
            "entities": self._entities.list_all,
            "payments": PaymentRepository(self._session).list_all,
            "agents": self._agents.list_all,
            "invitations": AgentInvitationRepository(self._session).list_all,
            "assignments": AssignmentRepository(self._session).list_all,
            "invoices": InvoiceRepository(self._session).list_all,
            "user_analytics": lambda: self._analytics.user_analytics(now),
            "entity_analytics": lambda: self._analytics.entity_analytics(now),
            "financial_analytics": lambda: self._analytics.financial_analytics(now),
            "system_stats": self._analytics.system_stats,
        })
        users = data["users"] or []
        entities = data["entities"] or []
        agents = data["agents"] or []

        agent_stats = metrics.agent_analytics(
            agents, data["invitations"] or [], data["assignments"] or []
        )
        fee_stats = dashboard_fee_metrics(entities, data["payments"] or [])

        return AdminDashboardOut(
            system=self._system_out(metrics.first_row(data["system_stats"]), len(users)),
            users=UserAnalyticsOut(**(metrics.first_row(data["user_analytics"]) or {})),
            entities=EntityAnalyticsOut(**(metrics.first_row(data["entity_analytics"]) or {})),
            financial=self._financial_out(metrics.first_row(data["financial_analytics"])),
            agents=AgentAnalyticsOut.model_validate(agent_stats),
            total_revenue=metrics.total_revenue(data["invoices"] or []),
            delaware_entities=fee_stats.delaware_entities,
            annual_entity_fees=fee_stats.annual_entity_fees,
            annual_service_fees=fee_stats.annual_service_fees,
            pending_payments=fee_stats.pending_payments,
            top_states=_count_items(metrics.top_n(
                metrics.distribution(entities, "state"), metrics.TOP_DISTRIBUTION
            )),
            top_entity_types=_count_items(metrics.top_n(
                metrics.distribution(entities, "type"), metrics.TOP_DISTRIBUTION
            )),
            top_state_coverage=_count_items(
                metrics.top_n(agent_stats.state_coverage, metrics.TOP_COVERAGE)
            ),
            failed_sections=failed,
        )

    # ------------------------------------------------------------------
    # Pre-aggregated analytics
    # ------------------------------------------------------------------

    @staticmethod
    def _system_out(row: dict[str, Any] | None, client_user_count: int) -> SystemStatsOut:
        row = row or {}
        return SystemStatsOut(
            total_users=row.get("total_users") or client_user_count,
            total_entities=row.get("total_entities") or 0,
            total_payments=row.get("total_payments") or 0,
            total_revenue=_money(row, "total_revenue"),
        )

    @staticmethod
    def _financial_out(row: dict[str, Any] | None) -> FinancialAnalyticsOut:
        if not row:
            return FinancialAnalyticsOut()
        return FinancialAnalyticsOut(
            total_revenue=_money(row, "total_revenue"),
            mrr=_money(row, "mrr"),
            arpu=_money(row, "arpu"),
            revenue_growth_rate=row.get("revenue_growth_rate") or 0.0,
            active_subscriptions=row.get("active_subscriptions") or 0,
        )

    async def user_analytics(self) -> UserAnalyticsOut:
        row = metrics.first_row(await self._analytics.user_analytics())
        return UserAnalyticsOut(**(row or {}))

    async def entity_analytics(self) -> EntityAnalyticsOut:
        row = metrics.first_row(await self._analytics.entity_analytics())
        return EntityAnalyticsOut(**(row or {}))

    async def financial_analytics(self) -> FinancialAnalyticsOut:
        return self._financial_out(metrics.first_row(await self._analytics.financial_analytics()))

    async def system_stats(self) -> SystemStatsOut:
        row = metrics.first_row(await self._analytics.system_stats())
        return self._system_out(row, await self._profiles.count())

    async def agent_analytics(self) -> AgentAnalyticsOut:
        stats = metrics.agent_analytics(
            await self._agents.list_all(),
            await AgentInvitationRepository(self._session).list_all(),
            await AssignmentRepository(self._session).list_all(),
        )
        return AgentAnalyticsOut.model_validate(stats)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def list_users(
        self, query: str | None = None, account_status: str | None = None
    ) -> list[Profile]:
        filters = {"account_status": account_status} if account_status else None
        users = await self._profiles.list_all(filters=filters)
        return metrics.search(users, query, USER_SEARCH_FIELDS)

    async def set_account_status(self, user_id: str, data: AccountStatusUpdate) -> Profile:
        if user_id == self._ctx.user_id and data.account_status == "suspended":
            raise ForbiddenError("You cannot suspend your own account")
        profile = await self._profiles.get_by_user(user_id)
        if profile is None:
            raise NotFoundError("User", user_id)

        updated = await self._profiles.update(profile.id, account_status=data.account_status)
        action = "user_suspended" if data.account_status == "suspended" else "user_activated"
        await self._record(
            action, "profile",
            entity_id=profile.id,
            target_user_id=user_id,
            metadata={"reason": data.reason} if data.reason else None,
            description=f"Account {data.account_status} by admin",
        )
        logger.info("Admin %s set user %s to %s", self._ctx.user_id, user_id, data.account_status)
        return updated  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def _user_emails(self) -> dict[str, str]:
        emails = {p.user_id: p.email for p in await self._profiles.list_all() if p.email}
        if self._platform is None:
            return emails
        try:
            emails.update(await self._platform.list_user_emails())
        except PlatformError:
            logger.warning("Could not resolve user emails through the platform, using profiles")
        return emails

    async def list_roles(self) -> list[RoleAssignmentOut]:
        assignments = await self._roles.list_all()
        emails = await self._user_emails()
        return [
            RoleAssignmentOut(
                id=a.id,
                user_id=a.user_id,
                role=a.role,
                email=emails.get(a.user_id, UNKNOWN_EMAIL),
                granted_by=a.granted_by,
                created_at=a.created_at,
            )
            for a in assignments
        ]

    async def assign_role(self, data: RoleAssignRequest) -> RoleAssignmentOut:
        if data.role in await self._roles.roles_for(data.user_id):
            raise ConflictError(f"User already has the '{data.role}' role")
        if await self._profiles.get_by_user(data.user_id) is None:
            raise NotFoundError("User", data.user_id)

        assignment = await self._roles.create(
            user_id=data.user_id, role=data.role, granted_by=self._ctx.user_id
        )
        await self._record(
            "role_assigned", "user_role",
            entity_id=assignment.id,
            target_user_id=data.user_id,
            metadata={"role": data.role},
            description=f"Granted {data.role} role",
        )
        emails = await self._user_emails()
        return RoleAssignmentOut(
            id=assignment.id,
            user_id=assignment.user_id,
            role=assignment.role,
            email=emails.get(assignment.user_id, UNKNOWN_EMAIL),
            granted_by=assignment.granted_by,
            created_at=assignment.created_at,
        )

    async def remove_role(self, user_id: str, role: str) -> None:
        if user_id == self._ctx.user_id and role == "admin":
            raise ForbiddenError("You cannot remove your own admin role")
        if not await self._roles.remove(user_id, role):
            raise NotFoundError("Role assignment")
        await self._record(
            "role_removed", "user_role",
            target_user_id=user_id,
            metadata={"role": role},
            description=f"Revoked {role} role",
        )

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    async def list_entities(self, query: str | None = None) -> list[Entity]:
        return metrics.search(await self._entities.list_all(), query, ENTITY_SEARCH_FIELDS)

    async def update_entity(self, entity_id: str, data: EntityUpdate) -> Entity:
        entity = await self._entities.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError("Entity", entity_id)
        changes = data.model_dump(exclude_none=True, exclude_unset=True)
        updated = await self._entities.update(entity_id, **changes)
        await self._record(
            "entity_updated", "entity",
            entity_id=entity_id,
            target_user_id=entity.user_id,
            metadata={"fields": sorted(changes)},
            description=f"Updated entity {entity.name}",
        )
        return updated  # type: ignore[return-value]

    async def delete_entity(self, entity_id: str) -> None:
        entity = await self._entities.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError("Entity", entity_id)
        await self._entities.soft_delete(entity_id)
        await self._record(
            "entity_deleted", "entity",
            entity_id=entity_id,
            target_user_id=entity.user_id,
            description=f"Deleted entity {entity.name}",
        )

    # ------------------------------------------------------------------
    # Agents (cached)
    # ------------------------------------------------------------------

    async def _agent_cache(self, refresh: bool = False) -> RecordCache[AgentOut]:
        cache = None if refresh else await self._cache.fetch("admin", "agents", AgentOut)
        if cache is None:
            cache = RecordCache()
            cache.load(AgentOut.model_validate(a) for a in await self._agents.list_all())
            await self._cache.store("admin", "agents", cache)
        return cache

    async def list_agents(self, query: str | None = None, refresh: bool = False) -> list[AgentOut]:
        cache = await self._agent_cache(refresh)
        return metrics.search(cache.values(), query, AGENT_SEARCH_FIELDS)

    async def set_agent_availability(self, agent_id: str, is_available: bool) -> AgentOut:
        """Toggle availability; the cached listing shows the change before the write lands.

        The store write, its audit event and the commit all run under the
        optimistic patch, so any failure leaves the shared listing unpatched.
        """
        cache = await self._agent_cache()
        async with self._cache.optimistic(
            "admin", "agents", cache, agent_id, is_available=is_available
        ):
            updated: Agent | None = await self._agents.update(agent_id, is_available=is_available)
            if updated is None:
                raise NotFoundError("Agent", agent_id)
            agent = AgentOut.model_validate(updated)
            await self._record(
                "agent_availability_changed", "agent",
                entity_id=agent_id,
                target_user_id=agent.user_id,
                metadata={"is_available": is_available},
            )
            await self._session.commit()
            cache.upsert(agent)
        await self._cache.store("admin", "agents", cache)
        return agent

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    async def _recent_audit(self, days: int | None) -> list[AuditTrail]:
        entries = await self._audit.list_all()
        if days:
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
            entries = [e for e in entries if as_utc(e.created_at) >= cutoff]
        return entries

    async def audit_log(
        self,
        query: str | None = None,
        entity_type: str | None = None,
        days: int | None = None,
        limit: int = 100,
    ) -> list[AuditTrail]:
        entries = await self._recent_audit(days)
        if entity_type:
            entries = [e for e in entries if e.entity_type == entity_type]
        return metrics.search(entries, query, AUDIT_SEARCH_FIELDS)[:limit]

    async def audit_stats(self, days: int = 30) -> AuditStatsOut:
        entries = await self._recent_audit(days)
        actors = metrics.distribution(entries, "actor_id", default="system")
        return AuditStatsOut(
            days=days,
            total_actions=len(entries),
            actions_by_type=metrics.distribution(entries, "entity_type"),
            actions_by_name=metrics.distribution(entries, "action"),
            top_actors=_count_items(metrics.top_n(actors, 5)),
        )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def compliance_report(self, data: ComplianceReportRequest) -> ComplianceReportOut:
        report = metrics.compliance_report(
            await self._entities.list_all(),
            await self._profiles.list_all(),
            await self._agents.list_all(),
            report_type=data.report_type,
            date_range=data.date_range,
        )
        await self._record(
            "report_generated", "report",
            metadata={"report_type": data.report_type, "date_range": data.date_range},
        )
        return ComplianceReportOut(
            filename=f"compliance-{data.report_type}-report-{report.generated_at:%Y-%m-%d}.txt",
            content=report.render(),
            generated_at=report.generated_at,
        )
