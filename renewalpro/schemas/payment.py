"""Payment and payment-method schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import computed_field

from renewalpro.schemas.common import CamelModel
from renewalpro.services.payment_status import PaymentDisplayStatus, classify_payment

PaymentStatus = Literal["pending", "scheduled", "paid", "failed"]


class PaymentOut(CamelModel):
    id: str
    entity_id: str | None = None
    entity_name: str
    type: str
    amount: float
    due_date: date
    status: str
    paid_date: datetime | None = None
    payment_method_id: str | None = None
    created_at: datetime

    @computed_field
    @property
    def display_status(self) -> PaymentDisplayStatus:
        # Recomputed on every serialization: "Overdue" depends on today's date
        return classify_payment(self.status, self.due_date)


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus
    payment_method_id: str | None = None


class PaymentSummaryOut(CamelModel):
    total: int
    pending: int
    scheduled: int
    overdue: int
    paid: int
    paid_amount: float
    outstanding_amount: float


class PaymentMethodOut(CamelModel):
    id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int
    is_default: bool
    created_at: datetime
