"""
Tests for role-derived record visibility.
"""

import pytest

from ats.database.models.user import UserRole
from ats.services.access import Actor, Role, scope_for


class TestScopeFor:
    """Elevated roles see everything, every other role sees its own records."""

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.OWNER, "admin", "OWNER"])
    def test_elevated_roles_are_unscoped(self, role):
        assert scope_for(role, 42) is None

    @pytest.mark.parametrize(
        "role", [Role.RECRUITER, Role.DEVELOPER, Role.CANDIDATE, "recruiter"]
    )
    def test_other_roles_are_scoped_to_self(self, role):
        assert scope_for(role, 42) == 42

    def test_unknown_role(self):
        with pytest.raises(ValueError, match="Invalid role"):
            scope_for("superuser", 42)


class TestActor:
    def test_admin_actor(self):
        actor = Actor(id=1, role=UserRole.ADMIN)
        assert actor.scope is None
        assert actor.is_elevated

    def test_recruiter_actor(self):
        actor = Actor(id=5, role=UserRole.RECRUITER)
        assert actor.scope == 5
        assert not actor.is_elevated
