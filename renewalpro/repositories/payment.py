"""Payment, payment-method and invoice repositories."""

from sqlalchemy import update

from renewalpro.domain.payment import Invoice, Payment, PaymentMethod
from renewalpro.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    model = Payment


class PaymentMethodRepository(BaseRepository[PaymentMethod]):
    model = PaymentMethod

    async def clear_default(self) -> None:
        await self._session.execute(
            self._scope(update(PaymentMethod))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()


class InvoiceRepository(BaseRepository[Invoice]):
    model = Invoice
