"""Admin dashboard, analytics, user management and audit-log schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import Field

from renewalpro.schemas.common import CamelModel


class CountItem(CamelModel):
    key: str
    count: int


class AgentAnalyticsOut(CamelModel):
    total_agents: int = 0
    available_agents: int = 0
    unavailable_agents: int = 0
    avg_price: float = 0.0
    avg_experience: float = 0.0
    state_coverage: dict[str, int] = Field(default_factory=dict)
    invitations: dict[str, int] = Field(default_factory=dict)
    assignments: dict[str, int] = Field(default_factory=dict)
    acceptance_rate: float | None = None


class UserAnalyticsOut(CamelModel):
    total_users: int = 0
    new_users_30d: int = 0
    user_growth_rate_30d: float = 0.0
    retention_rate: float = 0.0
    trial_conversion_rate: float = 0.0


class EntityAnalyticsOut(CamelModel):
    total_entities: int = 0
    entity_creation_rate_30d: int = 0
    avg_entities_per_customer: float = 0.0
    most_popular_entity_type: str | None = None
    most_popular_state: str | None = None
    entities_by_state: dict[str, int] = Field(default_factory=dict)
    entities_by_type: dict[str, int] = Field(default_factory=dict)


class FinancialAnalyticsOut(CamelModel):
    """Amounts in major currency units."""

    total_revenue: Decimal = Decimal("0.00")
    mrr: Decimal = Decimal("0.00")
    arpu: Decimal = Decimal("0.00")
    revenue_growth_rate: float = 0.0
    active_subscriptions: int = 0


class SystemStatsOut(CamelModel):
    total_users: int = 0
    total_entities: int = 0
    total_payments: int = 0
    total_revenue: Decimal = Decimal("0.00")


class AdminDashboardOut(CamelModel):
    system: SystemStatsOut
    users: UserAnalyticsOut
    entities: EntityAnalyticsOut
    financial: FinancialAnalyticsOut
    agents: AgentAnalyticsOut
    total_revenue: Decimal
    delaware_entities: int
    annual_entity_fees: float
    annual_service_fees: float
    pending_payments: float
    top_states: list[CountItem]
    top_entity_types: list[CountItem]
    top_state_coverage: list[CountItem]
    failed_sections: list[str] = Field(default_factory=list)


class AdminUserOut(CamelModel):
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


class AccountStatusUpdate(CamelModel):
    account_status: Literal["active", "suspended"]
    reason: str | None = None


class RoleAssignmentOut(CamelModel):
    id: str
    user_id: str
    role: str
    email: str
    granted_by: str | None = None
    created_at: datetime


class RoleAssignRequest(CamelModel):
    user_id: str
    role: Literal["admin", "moderator", "support"] = "admin"


class AuditEntryOut(CamelModel):
    id: str
    actor_id: str | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    target_user_id: str | None = None
    event_metadata: dict[str, Any] | None = Field(default=None, serialization_alias="metadata")
    description: str | None = None
    ip_address: str | None = None
    created_at: datetime


class ComplianceReportRequest(CamelModel):
    report_type: Literal["summary", "detailed", "audit"] = "summary"
    date_range: Literal["30d", "90d", "1y", "all"] = "30d"


class ComplianceReportOut(CamelModel):
    filename: str
    content: str
    generated_at: datetime


class AuditStatsOut(CamelModel):
    days: int
    total_actions: int = 0
    actions_by_type: dict[str, int] = Field(default_factory=dict)
    actions_by_name: dict[str, int] = Field(default_factory=dict)
    top_actors: list[CountItem] = Field(default_factory=list)
