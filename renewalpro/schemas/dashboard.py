"""Owner dashboard schemas."""

from renewalpro.schemas.common import CamelModel


class DashboardMetricsOut(CamelModel):
    total_entities: int
    delaware_entities: int
    annual_entity_fees: float
    annual_service_fees: float
    pending_payments: float
    avg_entity_fee: int


class FeeLineItemOut(CamelModel):
    entity_id: str
    entity_name: str
    state: str
    kind: str
    months: list[float]
    total: float


class FeeScheduleOut(CamelModel):
    year: int
    months: list[str]
    line_items: list[FeeLineItemOut]
    month_totals: list[float]
    grand_total: float
