"""Route access policy.

The policy is evaluated here, on the server, from the stored profile and role
grants.  The front end receives the decision (``GET /api/v1/session``) and
only uses it to pick what to render; every admin endpoint re-checks the same
policy through ``require_admin``.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterable, Optional


class AccessLevel(str, enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    OWNER = "owner"
    REGISTERED_AGENT = "registered_agent"


class AccessDecision(str, enum.Enum):
    LOADING = "loading"
    RENDER = "render"
    REDIRECT = "redirect"
    REDIRECT_LOGIN = "redirect_login"


LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"

ROUTES: dict[str, AccessLevel] = {
    "/": AccessLevel.PUBLIC,
    "/terms": AccessLevel.PUBLIC,
    "/privacy": AccessLevel.PUBLIC,
    "/login": AccessLevel.PUBLIC,
    "/signup": AccessLevel.PUBLIC,
    "/register": AccessLevel.PUBLIC,
    "/forgot-password": AccessLevel.PUBLIC,
    "/agent-signup": AccessLevel.PUBLIC,
    "/dashboard": AccessLevel.AUTHENTICATED,
    "/settings": AccessLevel.AUTHENTICATED,
    "/reports": AccessLevel.AUTHENTICATED,
    "/analytics": AccessLevel.AUTHENTICATED,
    "/team": AccessLevel.AUTHENTICATED,
    "/billing": AccessLevel.AUTHENTICATED,
    "/payments": AccessLevel.AUTHENTICATED,
    "/entities": AccessLevel.AUTHENTICATED,
    "/entity/:id": AccessLevel.AUTHENTICATED,
    "/calendar": AccessLevel.AUTHENTICATED,
    "/agents": AccessLevel.AUTHENTICATED,
    "/find-agents": AccessLevel.OWNER,
    "/entity-dashboard": AccessLevel.OWNER,
    "/agent-dashboard": AccessLevel.REGISTERED_AGENT,
    "/admin-dashboard": AccessLevel.ADMIN,
    "/admin-analytics": AccessLevel.ADMIN,
    "/admin-audit": AccessLevel.ADMIN,
}


@dataclass(frozen=True)
class Principal:
    """What the policy knows about the caller."""

    user_id: str
    user_type: str = "owner"
    is_admin: bool = False
    suspended: bool = False


def has_admin_access(profile_is_admin: bool, roles: Iterable[str]) -> bool:
    return profile_is_admin or "admin" in set(roles)


def _pattern(path: str) -> re.Pattern:
    return re.compile("^" + re.sub(r":[^/]+", "[^/]+", path) + "$")


_COMPILED = [(_pattern(path), level) for path, level in ROUTES.items()]


def route_level(path: str) -> AccessLevel:
    """Access level for an application path; unknown paths need a session."""
    clean = path.split("?", 1)[0].rstrip("/") or "/"
    for pattern, level in _COMPILED:
        if pattern.match(clean):
            return level
    return AccessLevel.AUTHENTICATED


def evaluate_access(
    principal: Optional[Principal],
    path: str,
    *,
    authenticated: bool = True,
) -> AccessDecision:
    """Decide what a route guard does for ``principal`` on ``path``.

    ``authenticated`` with no principal means the profile has not been
    provisioned yet, which the guard shows as loading.
    """
    level = route_level(path)
    if level is AccessLevel.PUBLIC:
        return AccessDecision.RENDER
    if not authenticated:
        return AccessDecision.REDIRECT_LOGIN
    if principal is None:
        return AccessDecision.LOADING
    if principal.suspended:
        return AccessDecision.REDIRECT_LOGIN
    if level is AccessLevel.AUTHENTICATED:
        return AccessDecision.RENDER
    if level is AccessLevel.ADMIN:
        return AccessDecision.RENDER if principal.is_admin else AccessDecision.REDIRECT
    # Role-specific pages; admins may view them too
    if principal.is_admin or principal.user_type == level.value:
        return AccessDecision.RENDER
    return AccessDecision.REDIRECT


def redirect_target(decision: AccessDecision) -> Optional[str]:
    if decision is AccessDecision.REDIRECT:
        return HOME_PATH
    if decision is AccessDecision.REDIRECT_LOGIN:
        return LOGIN_PATH
    return None
