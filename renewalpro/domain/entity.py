"""SQLAlchemy ORM model for business entities tracked for renewal and compliance.

Annual fee and director requirement are not stored; they are looked up from
the state fee table when the entity is serialized.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from renewalpro.db.base import Base
from renewalpro.domain.mixins import OwnerMixin, TimestampMixin, new_id


class EntityType(str, enum.Enum):
    SOLE_PROPRIETORSHIP = "sole_proprietorship"
    PARTNERSHIP = "partnership"
    LLC = "llc"
    C_CORP = "c_corp"
    S_CORP = "s_corp"


class Entity(Base, OwnerMixin, TimestampMixin):
    __tablename__ = "entities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Optional team the entity is shared with
    team_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False, index=True)
    formation_date: Mapped[date] = mapped_column(Date, nullable=False)
    # "active" | "pending" | "dissolved"
    status: Mapped[str] = mapped_column(String(50), default="active", nullable=False)

    registered_agent_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    registered_agent_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    registered_agent_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    registered_agent_fee: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )
    registered_agent_fee_due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Only meaningful for Delaware entities
    independent_director_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    independent_director_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    independent_director_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    independent_director_fee: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )
    independent_director_fee_due_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
