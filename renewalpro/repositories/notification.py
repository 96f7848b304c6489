"""Notification and notification preference repositories."""

from renewalpro.domain.notification import Notification, NotificationPreferences
from renewalpro.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def unread_count(self) -> int:
        return await self.count({"read": False})

    async def mark_all_read(self) -> int:
        return await self.update_where({"read": False}, read=True)


class NotificationPreferencesRepository(BaseRepository[NotificationPreferences]):
    model = NotificationPreferences

    async def get_mine(self) -> NotificationPreferences | None:
        result = await self._session.execute(self._base_query())
        return result.scalars().first()
