"""Payment and payment-method routers."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.pagination import PaginationParams
from renewalpro.core.response import DataResponse, ListResponse, paginate_filtered
from renewalpro.db.base import get_db
from renewalpro.dependencies import RequestContext, get_context
from renewalpro.schemas.payment import (
    PaymentMethodOut,
    PaymentOut,
    PaymentStatusUpdate,
    PaymentSummaryOut,
)
from renewalpro.services.payment import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])
methods_router = APIRouter(prefix="/payment-methods", tags=["Payment Methods"])


def _svc(session: AsyncSession, ctx: RequestContext) -> PaymentService:
    return PaymentService(session, ctx)


@router.get("", response_model=ListResponse[PaymentOut])
async def list_payments(
    q: Optional[str] = Query(default=None, description="Search entity name, type or status"),
    filter_status: Optional[str] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    """List payments by due date, each with its derived display status."""
    items = await _svc(session, ctx).list_payments(q, status=filter_status)
    return paginate_filtered([PaymentOut.model_validate(p) for p in items], pagination)


@router.get("/summary", response_model=DataResponse[PaymentSummaryOut])
async def payment_summary(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    return {"data": await _svc(session, ctx).summary()}


@router.get("/{payment_id}", response_model=DataResponse[PaymentOut])
async def get_payment(
    payment_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    payment = await _svc(session, ctx).get_payment(payment_id)
    return {"data": PaymentOut.model_validate(payment)}


@router.patch("/{payment_id}/status", response_model=DataResponse[PaymentOut])
async def update_payment_status(
    payment_id: str,
    body: PaymentStatusUpdate,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    payment = await _svc(session, ctx).update_status(payment_id, body)
    return {"data": PaymentOut.model_validate(payment)}


# ------------------------------------------------------------------
# Payment methods
# ------------------------------------------------------------------

@methods_router.get("", response_model=DataResponse[list[PaymentMethodOut]])
async def list_payment_methods(
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    methods = await _svc(session, ctx).list_methods()
    return {"data": [PaymentMethodOut.model_validate(m) for m in methods]}


@methods_router.post("/{method_id}/default", response_model=DataResponse[PaymentMethodOut])
async def set_default_payment_method(
    method_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    method = await _svc(session, ctx).set_default_method(method_id)
    return {"data": PaymentMethodOut.model_validate(method)}


@methods_router.delete("/{method_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_method(
    method_id: str,
    ctx: RequestContext = Depends(get_context),
    session: AsyncSession = Depends(get_db),
):
    await _svc(session, ctx).delete_method(method_id)
