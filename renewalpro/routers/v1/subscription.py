"""Session and subscription router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.profile import CheckoutRequest, RedirectOut, SessionOut, SubscriptionOut
from renewalpro.services.platform import PlatformClient, get_platform
from renewalpro.services.subscription import SubscriptionService

router = APIRouter(tags=["Subscription"])


def _svc(session: AsyncSession, ctx: RequestContext, platform: PlatformClient) -> SubscriptionService:
    return SubscriptionService(session, ctx, platform)


@router.get("/session", response_model=DataResponse[SessionOut])
async def current_session(
    path: Optional[str] = Query(default=None, description="Route to evaluate the access policy for"),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    platform: PlatformClient = Depends(get_platform),
):
    """Profile, subscription and, when ``path`` is given, the route guard decision."""
    return {"data": await _svc(session, ctx, platform).session_info(path)}


@router.get("/subscription", response_model=DataResponse[SubscriptionOut])
async def current_subscription(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    platform: PlatformClient = Depends(get_platform),
):
    return {"data": await _svc(session, ctx, platform).current()}


@router.post("/subscription/checkout", response_model=DataResponse[RedirectOut])
async def checkout(
    body: CheckoutRequest,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    platform: PlatformClient = Depends(get_platform),
):
    return {"data": await _svc(session, ctx, platform).checkout(body)}


@router.post("/subscription/portal", response_model=DataResponse[RedirectOut])
async def billing_portal(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
    platform: PlatformClient = Depends(get_platform),
):
    return {"data": await _svc(session, ctx, platform).portal()}
