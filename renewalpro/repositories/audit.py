"""Append-only audit trail repository."""

from __future__ import annotations

from typing import Any

from renewalpro.domain.audit import AuditTrail
from renewalpro.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditTrail]):
    model = AuditTrail
    owner_column = "actor_id"

    async def record(
        self,
        *,
        actor_id: str | None,
        action: str,
        entity_type: str,
        entity_id: str | None = None,
        target_user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        description: str | None = None,
    ) -> AuditTrail:
        return await self.create(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            target_user_id=target_user_id,
            event_metadata=metadata,
            description=description,
        )
