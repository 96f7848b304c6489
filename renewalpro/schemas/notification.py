"""Notification schemas."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, field_validator

from renewalpro.schemas.common import CamelModel

NotificationKind = Literal["payment_due", "renewal_reminder", "compliance_check", "other"]


class NotificationCreate(CamelModel):
    user_id: str
    type: NotificationKind = "other"
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    notification_type: Literal["in_app", "email", "both"] = "in_app"


class NotificationOut(CamelModel):
    id: str
    title: str
    message: str
    type: str
    read: bool
    email_sent: bool
    notification_type: str | None = None
    created_at: datetime


PreferenceKind = Literal["renewal_reminder", "payment_due", "compliance_check"]


class NotificationPreferencesOut(CamelModel):
    email_notifications: bool
    reminder_days_before: list[int]
    notification_types: list[str]
    updated_at: datetime


class NotificationPreferencesUpdate(CamelModel):
    email_notifications: bool | None = None
    reminder_days_before: list[Annotated[int, Field(ge=1, le=365)]] | None = None
    notification_types: list[PreferenceKind] | None = None

    @field_validator("reminder_days_before")
    @classmethod
    def _largest_first(cls, days: list[int] | None) -> list[int] | None:
        return sorted(set(days), reverse=True) if days is not None else None

    @field_validator("notification_types")
    @classmethod
    def _unique_types(cls, kinds: list[str] | None) -> list[str] | None:
        return list(dict.fromkeys(kinds)) if kinds is not None else None
