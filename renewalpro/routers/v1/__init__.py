"""v1 router package: all /api/v1/* endpoints live here.

Files:
  entities.py           entity portfolio, form hints, tier limits
  dashboard.py          owner fee metrics and fee schedule
  payments.py           payments and payment methods
  notifications.py      in-app notifications and notification preferences
  compliance.py         compliance checks and entity officers
  teams.py              teams, members, invitations
  agents.py             registered-agent directory and profiles
  agent_invitations.py  agent invitations and assignments
  subscription.py       session, subscription, checkout, billing portal
  admin.py              admin dashboard, analytics, management, reports

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to renewalpro/services/.
"""
