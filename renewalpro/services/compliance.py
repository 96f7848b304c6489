"""Compliance tracker: per-entity checks with an overdue rule, and entity officers."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.exceptions import NotFoundError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.compliance import ComplianceCheck, Officer
from renewalpro.domain.mixins import utc_today
from renewalpro.repositories.compliance import ComplianceCheckRepository, OfficerRepository
from renewalpro.repositories.entity import EntityRepository
from renewalpro.schemas.compliance import (
    ComplianceCheckCreate,
    ComplianceCheckUpdate,
    OfficerCreate,
    OfficerUpdate,
)
from renewalpro.services.compliance_status import ComplianceSummary, summarize_checks
from renewalpro.services.metrics import search

logger = logging.getLogger(__name__)

CHECK_SEARCH_FIELDS = ("check_name", "check_type", "notes")


def _due_order(check: ComplianceCheck) -> tuple[bool, date]:
    # undated checks sort last
    return (check.due_date is None, check.due_date or date.max)


class ComplianceService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._ctx = ctx
        self._repo = ComplianceCheckRepository(session, ctx.user_id)
        self._entities = EntityRepository(session, ctx.user_id)

    async def _require_entity(self, entity_id: str | None) -> None:
        if entity_id is not None and await self._entities.get_by_id(entity_id) is None:
            raise NotFoundError("Entity", entity_id)

    async def list_checks(
        self,
        entity_id: str | None = None,
        status: str | None = None,
        query: str | None = None,
    ) -> list[ComplianceCheck]:
        """Owned checks, soonest due first."""
        checks = await self._repo.list_all(filters={"entity_id": entity_id, "status": status})
        checks.sort(key=_due_order)
        return search(checks, query, CHECK_SEARCH_FIELDS)

    async def get_check(self, check_id: str) -> ComplianceCheck:
        check = await self._repo.get_by_id(check_id)
        if check is None:
            raise NotFoundError("ComplianceCheck", check_id)
        return check

    async def create_check(self, data: ComplianceCheckCreate) -> ComplianceCheck:
        await self._require_entity(data.entity_id)
        values = data.model_dump(exclude_none=True)
        if data.status == "completed" and data.completion_date is None:
            values["completion_date"] = utc_today()
        check = await self._repo.create(**values)
        logger.info("Compliance check %s created for user %s", check.id, self._ctx.user_id)
        return check

    async def update_check(self, check_id: str, data: ComplianceCheckUpdate) -> ComplianceCheck:
        """Apply ``data``; completing stamps today's date, any other status clears it."""
        current = await self.get_check(check_id)
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        await self._require_entity(values.get("entity_id"))

        if data.status == "completed":
            if data.completion_date is None and current.completion_date is None:
                values["completion_date"] = utc_today()
        elif data.status is not None:
            values["completion_date"] = None

        updated = await self._repo.update(check_id, **values)
        return updated  # type: ignore[return-value]

    async def delete_check(self, check_id: str) -> None:
        if not await self._repo.soft_delete(check_id):
            raise NotFoundError("ComplianceCheck", check_id)

    async def summary(self, entity_id: str | None = None) -> ComplianceSummary:
        return summarize_checks(await self._repo.list_all(filters={"entity_id": entity_id}))


class OfficerService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._ctx = ctx
        self._repo = OfficerRepository(session, ctx.user_id)
        self._entities = EntityRepository(session, ctx.user_id)

    async def _require_entity(self, entity_id: str) -> None:
        if await self._entities.get_by_id(entity_id) is None:
            raise NotFoundError("Entity", entity_id)

    async def list_for_entity(self, entity_id: str) -> list[Officer]:
        await self._require_entity(entity_id)
        return await self._repo.for_entity(entity_id)

    async def create_officer(self, entity_id: str, data: OfficerCreate) -> Officer:
        await self._require_entity(entity_id)
        officer = await self._repo.create(entity_id=entity_id, **data.model_dump(exclude_none=True))
        logger.info("Officer %s added to entity %s", officer.id, entity_id)
        return officer

    async def update_officer(self, officer_id: str, data: OfficerUpdate) -> Officer:
        if await self._repo.get_by_id(officer_id) is None:
            raise NotFoundError("Officer", officer_id)
        updated = await self._repo.update(
            officer_id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        return updated  # type: ignore[return-value]

    async def delete_officer(self, officer_id: str) -> None:
        if not await self._repo.soft_delete(officer_id):
            raise NotFoundError("Officer", officer_id)
