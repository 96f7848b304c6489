"""Registered-agent marketplace schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from renewalpro.schemas.common import CamelModel


class AgentProfileCreate(CamelModel):
    company_name: str | None = None
    contact_email: str | None = None
    bio: str | None = None
    states: list[str] = Field(min_length=1)
    price_per_entity: float | None = Field(default=None, ge=0)
    years_experience: int | None = Field(default=None, ge=0)
    is_available: bool = True

    @field_validator("states")
    @classmethod
    def _upper_states(cls, value: list[str]) -> list[str]:
        return sorted({s.strip().upper() for s in value if s.strip()})

    @field_validator("contact_email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value


class AgentProfileUpdate(CamelModel):
    company_name: str | None = None
    contact_email: str | None = None
    bio: str | None = None
    states: list[str] | None = None
    price_per_entity: float | None = Field(default=None, ge=0)
    years_experience: int | None = Field(default=None, ge=0)
    is_available: bool | None = None

    @field_validator("states")
    @classmethod
    def _upper_states(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return value
        return sorted({s.strip().upper() for s in value if s.strip()})

    @field_validator("contact_email")
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value


class AgentOut(CamelModel):
    id: str
    user_id: str
    company_name: str | None = None
    contact_email: str | None = None
    bio: str | None = None
    states: list[str]
    price_per_entity: float
    years_experience: int | None = None
    is_available: bool
    created_at: datetime
    updated_at: datetime


class AgentDirectoryOut(CamelModel):
    """Directory card: contact details and pricing stay hidden until assigned."""

    id: str
    company_name: str | None = None
    bio: str | None = None
    states: list[str]
    years_experience: int | None = None
    is_available: bool


class AgentAvailabilityUpdate(CamelModel):
    is_available: bool


class AgentInvitationCreate(CamelModel):
    entity_id: str
    agent_email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    message: str | None = None


class AgentInvitationOut(CamelModel):
    id: str
    entity_id: str
    entity_owner_id: str
    agent_email: str
    agent_id: str | None = None
    token: str
    status: str
    expires_at: datetime
    message: str | None = None
    created_at: datetime


class AssignmentOut(CamelModel):
    id: str
    entity_id: str
    agent_id: str
    status: str
    agreed_fee: float
    assigned_at: datetime
    terminated_at: datetime | None = None


class AgentInvitationMetricsOut(CamelModel):
    total_sent: int = 0
    pending_count: int = 0
    accepted_count: int = 0
    declined_count: int = 0
    unsent_count: int = 0
    entities_with_agents: int = 0


class AgentInvitationResponse(CamelModel):
    token: str = Field(min_length=1)
    response: Literal["accepted", "declined"]
