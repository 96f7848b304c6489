"""Entity repository."""

from sqlalchemy import or_, select

from renewalpro.domain.entity import Entity
from renewalpro.repositories.base import BaseRepository


class EntityRepository(BaseRepository[Entity]):
    model = Entity

    async def list_visible(self, team_id: str | None = None) -> list[Entity]:
        """Owned entities, plus the shared entities of the selected team."""
        if team_id is None or self._owner_id is None:
            return await self.list_all()
        q = (
            select(Entity)
            .where(Entity.deleted_at.is_(None))
            .where(or_(Entity.user_id == self._owner_id, Entity.team_id == team_id))
            .order_by(Entity.created_at.desc())
        )
        return list((await self._session.execute(q)).scalars().all())
