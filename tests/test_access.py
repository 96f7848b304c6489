"""
RenewalPro API - Route Access Policy Tests
"""

import pytest

from renewalpro.services.access import (
    AccessDecision,
    AccessLevel,
    Principal,
    evaluate_access,
    has_admin_access,
    redirect_target,
    route_level,
)

OWNER = Principal(user_id="u-1")
ADMIN = Principal(user_id="u-2", is_admin=True)
AGENT = Principal(user_id="u-3", user_type="registered_agent")


class TestRouteLevel:
    @pytest.mark.parametrize(
        "path,level",
        [
            ("/", AccessLevel.PUBLIC),
            ("/login", AccessLevel.PUBLIC),
            ("/dashboard/", AccessLevel.AUTHENTICATED),
            ("/entity/abc-123", AccessLevel.AUTHENTICATED),
            ("/admin-dashboard?tab=users", AccessLevel.ADMIN),
            ("/agent-dashboard", AccessLevel.REGISTERED_AGENT),
            ("/somewhere-new", AccessLevel.AUTHENTICATED),
        ],
    )
    def test_levels(self, path, level):
        assert route_level(path) is level


class TestEvaluateAccess:
    """Guard decisions: loading, render, redirect, redirect to login."""

    def test_public_pages_always_render(self):
        assert evaluate_access(None, "/terms", authenticated=False) is AccessDecision.RENDER

    def test_unauthenticated_goes_to_login(self):
        decision = evaluate_access(None, "/dashboard", authenticated=False)
        assert decision is AccessDecision.REDIRECT_LOGIN
        assert redirect_target(decision) == "/login"

    def test_missing_profile_is_loading(self):
        decision = evaluate_access(None, "/dashboard")
        assert decision is AccessDecision.LOADING
        assert redirect_target(decision) is None

    def test_admin_page_for_non_admin_redirects_home(self):
        decision = evaluate_access(OWNER, "/admin-audit")
        assert decision is AccessDecision.REDIRECT
        assert redirect_target(decision) == "/dashboard"

    def test_admin_page_for_admin(self):
        assert evaluate_access(ADMIN, "/admin-analytics") is AccessDecision.RENDER

    def test_role_pages(self):
        assert evaluate_access(AGENT, "/agent-dashboard") is AccessDecision.RENDER
        assert evaluate_access(OWNER, "/agent-dashboard") is AccessDecision.REDIRECT
        assert evaluate_access(AGENT, "/find-agents") is AccessDecision.REDIRECT
        assert evaluate_access(ADMIN, "/agent-dashboard") is AccessDecision.RENDER

    def test_suspended_user_is_signed_out(self):
        suspended = Principal(user_id="u-4", suspended=True)
        assert evaluate_access(suspended, "/dashboard") is AccessDecision.REDIRECT_LOGIN


def test_has_admin_access():
    assert has_admin_access(True, []) is True
    assert has_admin_access(False, ["moderator", "admin"]) is True
    assert has_admin_access(False, ["moderator"]) is False
