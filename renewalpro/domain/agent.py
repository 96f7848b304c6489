"""SQLAlchemy ORM models for the registered-agent marketplace.

An ``Agent`` is a registered agent's public profile.  Entity owners send an
``AgentInvitation`` for one of their entities; accepting it creates an
``EntityAgentAssignment`` which stays ``accepted`` until terminated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from renewalpro.db.base import Base
from renewalpro.domain.mixins import TimestampMixin, new_id


class Agent(Base, TimestampMixin):
    __tablename__ = "agents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True, index=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Covered USPS state codes, e.g. ["DE", "NY"]
    states: Mapped[Any] = mapped_column(JSON, default=list, nullable=False)
    price_per_entity: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )
    years_experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)


class AgentInvitation(Base, TimestampMixin):
    __tablename__ = "agent_invitations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    entity_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entity_owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    agent_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    agent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("agents.id", ondelete="SET NULL"), nullable=True
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    # pending | accepted | declined | expired | unsent
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class EntityAgentAssignment(Base, TimestampMixin):
    __tablename__ = "entity_agent_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    entity_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agent_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("agents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # accepted | terminated
    status: Mapped[str] = mapped_column(String(20), default="accepted", nullable=False, index=True)
    agreed_fee: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), default=0, nullable=False
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    terminated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    agent: Mapped["Agent"] = relationship(lazy="joined")
