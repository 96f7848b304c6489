"""Generic async repository with soft-delete, pagination, and owner isolation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    When constructed with an ``owner_id`` every query is filtered by the
    model's ``user_id`` column, so one user can never read or write another
    user's rows.  Admin code paths pass ``owner_id=None`` for an unscoped view.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads.
    """

    model: type[ModelT]
    owner_column: str = "user_id"

    def __init__(self, session: AsyncSession, owner_id: str | None = None):
        self._session = session
        self._owner_id = owner_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _scope(self, q):
        if self._owner_id is not None:
            q = q.where(getattr(self.model, self.owner_column) == self._owner_id)
        return q

    def _base_query(self):
        """Return a SELECT filtered by owner and excluding soft-deleted rows."""
        q = self._scope(select(self.model))
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _apply_filters(self, q, filters: dict[str, Any] | None):
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)
        return q

    def _apply_order(self, q, order_by: str, order: str):
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._apply_filters(self._base_query(), filters)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        q = self._apply_order(q, order_by, order).offset(offset).limit(limit)
        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    async def list_all(
        self,
        *,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> list[ModelT]:
        """Return every visible row, newest first by default."""
        q = self._apply_order(self._apply_filters(self._base_query(), filters), order_by, order)
        items = (await self._session.execute(q)).scalars().unique().all()
        return list(items)

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        q = self._apply_filters(self._base_query(), filters)
        return (await self._session.execute(
            select(func.count()).select_from(q.subquery())
        )).scalar_one()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        if self._owner_id is not None and self.owner_column not in kwargs:
            kwargs[self.owner_column] = self._owner_id
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop(self.owner_column, None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = datetime.now(timezone.utc)

        await self._session.execute(
            self._scope(update(self.model).where(self.model.id == entity_id))
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def update_where(self, filters: dict[str, Any], **kwargs: Any) -> int:
        """Bulk update every owned row matching ``filters``; returns the row count."""
        stmt = self._scope(update(self.model))
        for col_name, value in filters.items():
            stmt = stmt.where(getattr(self.model, col_name) == value)
        result = await self._session.execute(
            stmt.values(**kwargs).execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            self._scope(update(self.model).where(self.model.id == entity_id))
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount > 0

    async def hard_delete(self, entity_id: str) -> bool:
        """Physically remove a row; reserved for link rows with no history value."""
        result = await self._session.execute(
            self._scope(delete(self.model).where(self.model.id == entity_id))
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount > 0
