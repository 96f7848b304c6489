"""Compliance check and officer schemas."""

from datetime import date, datetime
from typing import Literal

from pydantic import Field, computed_field

from renewalpro.schemas.common import CamelModel
from renewalpro.services.compliance_status import CheckDisplayStatus, classify_check

CheckStatus = Literal["pending", "completed", "overdue", "failed"]


class ComplianceCheckCreate(CamelModel):
    entity_id: str | None = None
    check_type: str = Field(min_length=1, max_length=50)
    check_name: str = Field(min_length=1, max_length=255)
    status: CheckStatus = "pending"
    due_date: date | None = None
    completion_date: date | None = None
    notes: str | None = None


class ComplianceCheckUpdate(CamelModel):
    entity_id: str | None = None
    check_type: str | None = Field(default=None, min_length=1, max_length=50)
    check_name: str | None = Field(default=None, min_length=1, max_length=255)
    status: CheckStatus | None = None
    due_date: date | None = None
    completion_date: date | None = None
    notes: str | None = None


class ComplianceCheckOut(CamelModel):
    id: str
    entity_id: str | None = None
    check_type: str
    check_name: str
    status: str
    due_date: date | None = None
    completion_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def display_status(self) -> CheckDisplayStatus:
        return classify_check(self.status, self.due_date)


class ComplianceSummaryOut(CamelModel):
    total: int
    completed: int
    overdue: int
    failed: int
    upcoming: int
    compliance_rate: int


class OfficerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    title: str = Field(min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    appointment_date: date | None = None
    is_active: bool = True


class OfficerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    appointment_date: date | None = None
    is_active: bool | None = None


class OfficerOut(CamelModel):
    id: str
    entity_id: str
    name: str
    title: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    appointment_date: date | None = None
    is_active: bool
    created_at: datetime
