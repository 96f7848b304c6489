"""Services package: all business logic lives here, never in routers.

Pure rules (no I/O):
  fees.py            state fee table, director rule, fee schedule, owner metrics
  metrics.py         search, distributions, agent analytics, compliance report
  payment_status.py  Paid / Scheduled / Overdue / Pending classification
  compliance_status.py  compliance check status and tracker summary
  access.py          route access policy
  cache.py           record caches with optimistic patches

Data access (constructed with a session and the request context):
  entity.py, payment.py, notification.py, team.py, agent.py,
  agent_invitation.py, subscription.py, admin.py, compliance.py

External:
  platform.py        auth-provider admin API and hosted billing sessions

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers.
"""
