"""Compliance check and officer repositories."""

from renewalpro.domain.compliance import ComplianceCheck, Officer
from renewalpro.repositories.base import BaseRepository


class ComplianceCheckRepository(BaseRepository[ComplianceCheck]):
    model = ComplianceCheck


class OfficerRepository(BaseRepository[Officer]):
    model = Officer

    async def for_entity(self, entity_id: str) -> list[Officer]:
        return await self.list_all(filters={"entity_id": entity_id})
