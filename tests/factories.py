"""Row builders, request helpers and test doubles shared by the tests."""

from datetime import date, datetime, timezone
from fnmatch import fnmatch

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.domain import Entity, Payment, Subscription

OWNER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_ID = "22222222-2222-2222-2222-222222222222"
ADMIN_ID = "33333333-3333-3333-3333-333333333333"
AGENT_USER_ID = "44444444-4444-4444-4444-444444444444"

PLATFORM_EMAILS = {
    OWNER_ID: "owner@example.com",
    ADMIN_ID: "admin@example.com",
}


def auth(user_id: str, team_id: str | None = None) -> dict:
    """Headers the auth gateway forwards for a signed-in user."""
    headers = {"X-User-Id": user_id}
    if team_id:
        headers["X-Team-Id"] = team_id
    return headers


async def add_entity(session: AsyncSession, user_id: str = OWNER_ID, **overrides) -> Entity:
    values = {
        "user_id": user_id,
        "name": "Acme Holdings LLC",
        "type": "llc",
        "state": "DE",
        "formation_date": date(2020, 5, 1),
    }
    values.update(overrides)
    entity = Entity(**values)
    session.add(entity)
    await session.commit()
    return entity


async def add_payment(session: AsyncSession, user_id: str = OWNER_ID, **overrides) -> Payment:
    values = {
        "user_id": user_id,
        "entity_name": "Acme Holdings LLC",
        "type": "Annual Report",
        "amount": 300.0,
        "due_date": date(2030, 3, 1),
        "status": "pending",
    }
    values.update(overrides)
    payment = Payment(**values)
    session.add(payment)
    await session.commit()
    return payment


async def add_subscription(
    session: AsyncSession, user_id: str = OWNER_ID, **overrides
) -> Subscription:
    values = {
        "user_id": user_id,
        "subscribed": True,
        "subscription_tier": "starter",
        "entities_limit": 5,
        "current_period_end": datetime(2030, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    subscription = Subscription(**values)
    session.add(subscription)
    await session.commit()
    return subscription


class InMemoryRedis:
    """The slice of the ``redis.asyncio`` client the cache registry talks to.

    Several registries can share one instance to stand in for workers sharing
    one Redis server.
    """

    def __init__(self):
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl: int, value) -> None:
        self.values[key] = value.decode() if isinstance(value, bytes) else value
        self.ttls[key] = ttl

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def scan_iter(self, match: str = "*"):
        for key in list(self.values):
            if fnmatch(key, match):
                yield key

    async def aclose(self) -> None:
        pass
