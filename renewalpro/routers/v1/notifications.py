"""Notification router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context, require_admin
from renewalpro.schemas.common import CountOut
from renewalpro.schemas.notification import (
    NotificationCreate,
    NotificationOut,
    NotificationPreferencesOut,
    NotificationPreferencesUpdate,
)
from renewalpro.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=DataResponse[list[NotificationOut]])
async def list_notifications(
    unread: bool = Query(default=False, description="Only unread notifications"),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    items = await NotificationService(session, ctx).list_notifications(unread_only=unread)
    return {"data": [NotificationOut.model_validate(n) for n in items]}


@router.get("/unread-count", response_model=DataResponse[CountOut])
async def unread_count(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    return {"data": CountOut(count=await NotificationService(session, ctx).unread_count())}


@router.get("/preferences", response_model=DataResponse[NotificationPreferencesOut])
async def get_preferences(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    preferences = await NotificationService(session, ctx).get_preferences()
    return {"data": NotificationPreferencesOut.model_validate(preferences)}


@router.put("/preferences", response_model=DataResponse[NotificationPreferencesOut])
async def update_preferences(
    body: NotificationPreferencesUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Reminder days are stored largest first without duplicates."""
    preferences = await NotificationService(session, ctx).update_preferences(body)
    return {"data": NotificationPreferencesOut.model_validate(preferences)}


@router.post("/read-all", response_model=DataResponse[CountOut])
async def mark_all_read(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Mark every unread notification read; returns how many changed."""
    return {"data": CountOut(count=await NotificationService(session, ctx).mark_all_read())}


@router.post("/{notification_id}/read", response_model=DataResponse[NotificationOut])
async def mark_read(
    notification_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    notification = await NotificationService(session, ctx).mark_read(notification_id)
    return {"data": NotificationOut.model_validate(notification)}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await NotificationService(session, ctx).delete_notification(notification_id)


@router.post("", response_model=DataResponse[NotificationOut], status_code=status.HTTP_201_CREATED)
async def send_notification(
    body: NotificationCreate,
    ctx: RequestContext = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
):
    """Queue a notification for any user. Delivery by email happens elsewhere."""
    notification = await NotificationService(session, ctx).send(body)
    return {"data": NotificationOut.model_validate(notification)}
