"""SQLAlchemy ORM models for payments, stored payment methods and billing invoices."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from renewalpro.db.base import Base
from renewalpro.domain.mixins import OwnerMixin, TimestampMixin, new_id


class Payment(Base, OwnerMixin, TimestampMixin):
    """A scheduled or completed fee obligation tied to an entity."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    entity_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    # Denormalized so payment history survives entity deletion
    entity_name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    # Stored status: pending | scheduled | paid | failed.  "Overdue" is derived.
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_method_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)


class PaymentMethod(Base, OwnerMixin, TimestampMixin):
    """Summary of a stored card; the instrument itself lives with the billing provider."""

    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    provider_method_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    brand: Mapped[str] = mapped_column(String(50), nullable=False)
    last4: Mapped[str] = mapped_column(String(4), nullable=False)
    exp_month: Mapped[int] = mapped_column(Integer, nullable=False)
    exp_year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Invoice(Base, TimestampMixin):
    """Mirror of a billing-provider invoice. Amounts are in minor units (cents)."""

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    provider_invoice_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    amount_due: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    amount_paid: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="usd", nullable=False)
    # draft | open | paid | void | uncollectible
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
