"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  entity.py         business entities (renewal / fee tracking)
  payment.py        payments, stored payment methods, billing invoices
  notification.py   user-facing notifications and notification preferences
  compliance.py     per-entity compliance checks and officers
  team.py           teams, memberships, team invitations
  agent.py          registered-agent marketplace (profiles, invitations, assignments)
  profile.py        user profiles, subscriptions, admin role grants
  audit.py          immutable audit trail (never updated or deleted)
  tiers.py          subscription pricing tiers and entity limits
  mixins.py         shared TimestampMixin, OwnerMixin
"""

from renewalpro.domain.agent import Agent, AgentInvitation, EntityAgentAssignment
from renewalpro.domain.audit import AuditTrail
from renewalpro.domain.compliance import ComplianceCheck, Officer
from renewalpro.domain.entity import Entity, EntityType
from renewalpro.domain.notification import Notification, NotificationPreferences
from renewalpro.domain.payment import Invoice, Payment, PaymentMethod
from renewalpro.domain.profile import Profile, RoleAssignment, Subscription
from renewalpro.domain.team import Team, TeamInvitation, TeamMembership

__all__ = [
    "Agent",
    "AgentInvitation",
    "AuditTrail",
    "ComplianceCheck",
    "Entity",
    "EntityAgentAssignment",
    "EntityType",
    "Invoice",
    "Notification",
    "NotificationPreferences",
    "Officer",
    "Payment",
    "PaymentMethod",
    "Profile",
    "RoleAssignment",
    "Subscription",
    "Team",
    "TeamInvitation",
    "TeamMembership",
]
