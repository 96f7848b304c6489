"""Entity Pydantic schemas (request DTOs and response models)."""

from datetime import date, datetime

from pydantic import Field, computed_field, field_validator

from renewalpro.domain.entity import EntityType
from renewalpro.domain.mixins import utc_today
from renewalpro.schemas.common import CamelModel
from renewalpro.services.fees import is_director_required, lookup_fee, state_name


def _upper_state(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip().upper()
    if len(value) != 2 or not value.isalpha():
        raise ValueError("state must be a two-letter code")
    return value


class EntityCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    type: EntityType
    state: str
    formation_date: date
    team_id: str | None = None
    registered_agent_name: str | None = None
    registered_agent_email: str | None = None
    registered_agent_phone: str | None = None
    registered_agent_fee: float = Field(default=0, ge=0)
    registered_agent_fee_due_date: date | None = None
    independent_director_name: str | None = None
    independent_director_email: str | None = None
    independent_director_phone: str | None = None
    independent_director_fee: float = Field(default=0, ge=0)
    independent_director_fee_due_date: date | None = None
    notes: str | None = None

    @field_validator("state")
    @classmethod
    def _check_state(cls, value: str | None) -> str | None:
        return _upper_state(value)

    @field_validator("formation_date")
    @classmethod
    def _not_future(cls, value: date) -> date:
        if value > utc_today():
            raise ValueError("formation date cannot be in the future")
        return value


class EntityUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: EntityType | None = None
    state: str | None = None
    formation_date: date | None = None
    team_id: str | None = None
    status: str | None = None
    registered_agent_name: str | None = None
    registered_agent_email: str | None = None
    registered_agent_phone: str | None = None
    registered_agent_fee: float | None = Field(default=None, ge=0)
    registered_agent_fee_due_date: date | None = None
    independent_director_name: str | None = None
    independent_director_email: str | None = None
    independent_director_phone: str | None = None
    independent_director_fee: float | None = Field(default=None, ge=0)
    independent_director_fee_due_date: date | None = None
    notes: str | None = None

    @field_validator("state")
    @classmethod
    def _check_state(cls, value: str | None) -> str | None:
        return _upper_state(value)


class EntityOut(CamelModel):
    id: str
    user_id: str
    team_id: str | None = None
    name: str
    type: str
    state: str
    formation_date: date
    status: str
    registered_agent_name: str | None = None
    registered_agent_email: str | None = None
    registered_agent_phone: str | None = None
    registered_agent_fee: float = 0
    registered_agent_fee_due_date: date | None = None
    independent_director_name: str | None = None
    independent_director_email: str | None = None
    independent_director_phone: str | None = None
    independent_director_fee: float = 0
    independent_director_fee_due_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def annual_fee(self) -> float:
        return lookup_fee(self.state, self.type)

    @computed_field
    @property
    def director_required(self) -> bool:
        return is_director_required(self.state, self.type)


class EntityFormHints(CamelModel):
    state: str
    type: str
    state_name: str | None
    annual_fee: float
    director_required: bool

    @classmethod
    def build(cls, state: str, entity_type: str) -> "EntityFormHints":
        return cls(
            state=state.upper(),
            type=entity_type,
            state_name=state_name(state),
            annual_fee=lookup_fee(state, entity_type),
            director_required=is_director_required(state, entity_type),
        )


class EntityLimitsOut(CamelModel):
    current_entities: int
    max_entities: int | None
    percentage_used: float
    is_near_limit: bool
    is_at_limit: bool
    can_add_more: bool
    next_tier: str | None = None
    next_tier_price: int | None = None
