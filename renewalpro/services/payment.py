"""Payment service: the owner's fee payments and saved payment methods."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from renewalpro.core.exceptions import NotFoundError, ValidationError
from renewalpro.dependencies import RequestContext
from renewalpro.domain.payment import Payment, PaymentMethod
from renewalpro.repositories.payment import PaymentMethodRepository, PaymentRepository
from renewalpro.schemas.payment import PaymentStatusUpdate, PaymentSummaryOut
from renewalpro.services.metrics import search
from renewalpro.services.payment_status import PaymentDisplayStatus, classify_payment

logger = logging.getLogger(__name__)

PAYMENT_SEARCH_FIELDS = ("entity_name", "type", "status")


class PaymentService:
    def __init__(self, session: AsyncSession, ctx: RequestContext):
        self._ctx = ctx
        self._repo = PaymentRepository(session, ctx.user_id)
        self._methods = PaymentMethodRepository(session, ctx.user_id)

    async def list_payments(
        self, query: str | None = None, status: str | None = None
    ) -> list[Payment]:
        filters = {"status": status} if status else None
        payments = await self._repo.list_all(order_by="due_date", order="asc", filters=filters)
        return search(payments, query, PAYMENT_SEARCH_FIELDS)

    async def get_payment(self, payment_id: str) -> Payment:
        payment = await self._repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def update_status(self, payment_id: str, data: PaymentStatusUpdate) -> Payment:
        payment = await self.get_payment(payment_id)
        changes: dict = {"status": data.status}
        if data.payment_method_id is not None:
            if await self._methods.get_by_id(data.payment_method_id) is None:
                raise NotFoundError("PaymentMethod", data.payment_method_id)
            changes["payment_method_id"] = data.payment_method_id
        if data.status == "paid":
            changes["paid_date"] = payment.paid_date or datetime.now(timezone.utc)
        else:
            changes["paid_date"] = None

        updated = await self._repo.update(payment_id, **changes)
        logger.info("Payment %s marked %s", payment_id, data.status)
        return updated  # type: ignore[return-value]

    async def summary(self) -> PaymentSummaryOut:
        payments = await self._repo.list_all()
        counts = {status: 0 for status in PaymentDisplayStatus}
        paid_amount = outstanding = 0.0
        for payment in payments:
            display = classify_payment(payment.status, payment.due_date)
            counts[display] += 1
            if display is PaymentDisplayStatus.PAID:
                paid_amount += payment.amount
            else:
                outstanding += payment.amount
        return PaymentSummaryOut(
            total=len(payments),
            pending=counts[PaymentDisplayStatus.PENDING],
            scheduled=counts[PaymentDisplayStatus.SCHEDULED],
            overdue=counts[PaymentDisplayStatus.OVERDUE],
            paid=counts[PaymentDisplayStatus.PAID],
            paid_amount=round(paid_amount, 2),
            outstanding_amount=round(outstanding, 2),
        )

    # ------------------------------------------------------------------
    # Payment methods
    # ------------------------------------------------------------------

    async def list_methods(self) -> list[PaymentMethod]:
        return await self._methods.list_all(order_by="created_at", order="asc")

    async def set_default_method(self, method_id: str) -> PaymentMethod:
        if await self._methods.get_by_id(method_id) is None:
            raise NotFoundError("PaymentMethod", method_id)
        # Exactly one default per user
        await self._methods.clear_default()
        updated = await self._methods.update(method_id, is_default=True)
        return updated  # type: ignore[return-value]

    async def delete_method(self, method_id: str) -> None:
        method = await self._methods.get_by_id(method_id)
        if method is None:
            raise NotFoundError("PaymentMethod", method_id)
        if method.is_default and await self._methods.count() > 1:
            raise ValidationError("Choose another default payment method before removing this one")
        await self._methods.soft_delete(method_id)
        logger.info("Payment method %s removed by user %s", method_id, self._ctx.user_id)
