"""Session and subscription service.

Checkout pages and the billing portal are hosted by the platform; this
service only asks for session URLs and reports what is stored locally.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.config import settings
from renewalpro.dependencies import RequestContext, load_principal
from renewalpro.repositories.profile import ProfileRepository, SubscriptionRepository
from renewalpro.schemas.profile import (
    CheckoutRequest,
    ProfileOut,
    RedirectOut,
    SessionOut,
    SubscriptionOut,
)
from renewalpro.services.access import evaluate_access, redirect_target
from renewalpro.services.platform import PlatformClient

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, session: AsyncSession, ctx: RequestContext, platform: PlatformClient):
        self._session = session
        self._ctx = ctx
        self._platform = platform
        self._profiles = ProfileRepository(session)
        self._subscriptions = SubscriptionRepository(session)

    async def current(self) -> SubscriptionOut:
        subscription = await self._subscriptions.get_by_user(self._ctx.user_id)
        if subscription is None:
            return SubscriptionOut()
        return SubscriptionOut.model_validate(subscription)

    async def session_info(self, path: str | None = None) -> SessionOut:
        """Who the caller is, and what the route guard should do on ``path``."""
        profile = await self._profiles.get_by_user(self._ctx.user_id)
        principal = await load_principal(self._session, self._ctx.user_id)
        out = SessionOut(
            user_id=self._ctx.user_id,
            profile=ProfileOut.model_validate(profile) if profile else None,
            subscription=await self.current(),
            is_admin=bool(principal and principal.is_admin),
        )
        if path:
            decision = evaluate_access(principal, path)
            out.route = path
            out.decision = decision.value
            out.redirect_to = redirect_target(decision)
        return out

    async def checkout(self, data: CheckoutRequest) -> RedirectOut:
        profile = await self._profiles.get_by_user(self._ctx.user_id)
        url = await self._platform.create_checkout_session(
            user_id=self._ctx.user_id,
            email=profile.email if profile else None,
            tier=data.tier,
            billing_cycle=data.billing_cycle,
        )
        logger.info("Checkout session opened for user %s (%s)", self._ctx.user_id, data.tier)
        return RedirectOut(url=url)

    async def portal(self) -> RedirectOut:
        url = await self._platform.create_portal_session(
            user_id=self._ctx.user_id, return_url=f"{settings.frontend_url}/billing"
        )
        return RedirectOut(url=url)
