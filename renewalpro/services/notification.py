"""Notification service."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.exceptions import NotFoundError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.notification import Notification, NotificationPreferences
from renewalpro.repositories.notification import (
    NotificationPreferencesRepository,
    NotificationRepository,
)
from renewalpro.schemas.notification import NotificationCreate, NotificationPreferencesUpdate

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._session = session
        self._ctx = ctx
        self._repo = NotificationRepository(session, ctx.user_id)
        self._preferences = NotificationPreferencesRepository(session, ctx.user_id)

    async def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        filters = {"read": False} if unread_only else None
        return await self._repo.list_all(filters=filters)

    async def unread_count(self) -> int:
        return await self._repo.unread_count()

    async def mark_read(self, notification_id: str) -> Notification:
        if await self._repo.get_by_id(notification_id) is None:
            raise NotFoundError("Notification", notification_id)
        updated = await self._repo.update(notification_id, read=True)
        return updated  # type: ignore[return-value]

    async def mark_all_read(self) -> int:
        marked = await self._repo.mark_all_read()
        logger.debug("Marked %s notifications read for user %s", marked, self._ctx.user_id)
        return marked

    async def delete_notification(self, notification_id: str) -> None:
        if not await self._repo.soft_delete(notification_id):
            raise NotFoundError("Notification", notification_id)

    async def send(self, data: NotificationCreate) -> Notification:
        """Create a notification for ``data.user_id`` (not necessarily the caller)."""
        repo = NotificationRepository(self._session, data.user_id)
        notification = await repo.create(**data.model_dump())
        logger.info(
            "Notification %s (%s) queued for user %s by %s",
            notification.id, data.type, data.user_id, self._ctx.user_id,
        )
        return notification

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    async def get_preferences(self) -> NotificationPreferences:
        """The caller's preferences, created with the defaults on first read."""
        preferences = await self._preferences.get_mine()
        if preferences is None:
            preferences = await self._preferences.create()
            logger.debug("Default notification preferences created for user %s", self._ctx.user_id)
        return preferences

    async def update_preferences(self, data: NotificationPreferencesUpdate) -> NotificationPreferences:
        preferences = await self.get_preferences()
        updated = await self._preferences.update(
            preferences.id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        return updated  # type: ignore[return-value]
