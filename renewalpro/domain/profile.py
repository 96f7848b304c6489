"""SQLAlchemy ORM models for user profiles, subscriptions and admin role grants."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from renewalpro.db.base import Base
from renewalpro.domain.mixins import TimestampMixin, new_id


class Profile(Base, TimestampMixin):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Auth provider's user id
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    plan: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # owner | registered_agent
    user_type: Mapped[str] = mapped_column(String(30), default="owner", nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # active | suspended
    account_status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)


class Subscription(Base, TimestampMixin):
    """Billing-provider authoritative; this service only mirrors and displays it."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # starter | professional | enterprise | unlimited
    subscription_tier: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    is_trial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # NULL means unlimited
    entities_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_period_end: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    provider_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class RoleAssignment(Base, TimestampMixin):
    __tablename__ = "role_assignments"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_role"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # admin | moderator | support
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    granted_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
