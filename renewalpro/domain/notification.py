"""SQLAlchemy ORM models for user-facing notifications and notification preferences."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from renewalpro.db.base import Base
from renewalpro.domain.mixins import OwnerMixin, TimestampMixin, new_id


class Notification(Base, OwnerMixin, TimestampMixin):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # payment_due | renewal_reminder | compliance_check | other
    type: Mapped[str] = mapped_column(String(50), default="other", nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    email_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Delivery channel: in_app | email | both
    notification_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


DEFAULT_REMINDER_DAYS = [30, 14, 7, 1]
DEFAULT_NOTIFICATION_TYPES = ["renewal_reminder", "payment_due", "compliance_check"]


class NotificationPreferences(Base, TimestampMixin):
    """One row per user; created with the defaults the first time it is read."""

    __tablename__ = "notification_preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Days before a due date to send reminders, largest first
    reminder_days_before: Mapped[Any] = mapped_column(
        JSON, default=lambda: list(DEFAULT_REMINDER_DAYS), nullable=False
    )
    notification_types: Mapped[Any] = mapped_column(
        JSON, default=lambda: list(DEFAULT_NOTIFICATION_TYPES), nullable=False
    )
