"""Owner dashboard router: fee metrics and the 12-month fee schedule."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.response import DataResponse
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.dashboard import DashboardMetricsOut, FeeLineItemOut, FeeScheduleOut
from renewalpro.services.entity import EntityService
from renewalpro.services.fees import MONTHS, FeePlacement

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/metrics", response_model=DataResponse[DashboardMetricsOut])
async def dashboard_metrics(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    fee_metrics = await EntityService(session, ctx).dashboard_metrics()
    return {"data": DashboardMetricsOut.model_validate(fee_metrics)}


@router.get("/schedule", response_model=DataResponse[FeeScheduleOut])
async def fee_schedule(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    renewal_month: Optional[int] = Query(default=None, ge=1, le=12),
    agent_month: Optional[int] = Query(default=None, ge=1, le=12),
    director_month: Optional[int] = Query(default=None, ge=1, le=12),
    use_due_dates: bool = Query(default=False, description="Place fees in their due-date month"),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """Annual fees laid out by month; month placement defaults come from settings."""
    placement = FeePlacement.from_settings(
        renewal_month=renewal_month,
        agent_month=agent_month,
        director_month=director_month,
        use_due_dates=use_due_dates,
    )
    schedule = await EntityService(session, ctx).fee_schedule(placement, year)
    return {"data": FeeScheduleOut(
        year=schedule.year,
        months=MONTHS,
        line_items=[FeeLineItemOut.model_validate(item) for item in schedule.line_items],
        month_totals=schedule.month_totals,
        grand_total=schedule.grand_total,
    )}
