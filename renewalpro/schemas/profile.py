"""Profile, subscription and session schemas."""

from datetime import datetime
from typing import Literal

from renewalpro.schemas.common import CamelModel


class ProfileOut(CamelModel):
    id: str
    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    plan: str | None = None
    user_type: str
    is_admin: bool
    account_status: str
    created_at: datetime


class SubscriptionOut(CamelModel):
    subscribed: bool = False
    subscription_tier: str | None = None
    is_trial: bool = False
    entities_limit: int | None = None
    current_period_end: datetime | None = None


class SessionOut(CamelModel):
    user_id: str
    profile: ProfileOut | None = None
    subscription: SubscriptionOut
    is_admin: bool
    route: str | None = None
    decision: str | None = None
    redirect_to: str | None = None


class CheckoutRequest(CamelModel):
    tier: Literal["starter", "professional", "enterprise", "unlimited"]
    billing_cycle: Literal["monthly", "yearly"] = "monthly"


class RedirectOut(CamelModel):
    url: str
