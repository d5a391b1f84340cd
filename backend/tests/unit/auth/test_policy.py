"""
Unit Tests for the complaint access policy
"""
import pytest

from app.core.exceptions import AuthorizationError
from app.modules.auth.policy import (
    Action,
    Caller,
    Resource,
    Decision,
    authorize,
    list_scope,
    filter_patch,
    CONTENT_FIELDS,
)


USER = Caller(account_id="u1", role="user")
OTHER = Caller(account_id="u2", role="user")
ADMIN = Caller(account_id="a1", role="admin")

OWNED_BY_USER = Resource(owner_id="u1", status="Pending")


class TestCreate:

    def test_any_caller_may_create(self):
        assert authorize(USER, Action.CREATE).allowed_fields == CONTENT_FIELDS
        assert authorize(ADMIN, Action.CREATE).allowed_fields == CONTENT_FIELDS

    def test_create_never_allows_status(self):
        assert "status" not in authorize(ADMIN, Action.CREATE).allowed_fields


class TestReadAll:

    def test_admin_unrestricted(self):
        assert list_scope(ADMIN) is None

    def test_user_restricted_to_self(self):
        assert list_scope(USER) == "u1"
        assert authorize(OTHER, Action.READ_ALL) == Decision(scope_owner_id="u2")


class TestResourceActions:

    @pytest.mark.parametrize("action", [Action.READ_ONE, Action.UPDATE_FIELDS, Action.DELETE])
    def test_owner_allowed(self, action):
        authorize(USER, action, OWNED_BY_USER)

    @pytest.mark.parametrize("action", [Action.READ_ONE, Action.UPDATE_FIELDS, Action.DELETE])
    def test_admin_allowed_on_any(self, action):
        authorize(ADMIN, action, OWNED_BY_USER)

    @pytest.mark.parametrize("action", [Action.READ_ONE, Action.UPDATE_FIELDS, Action.DELETE])
    def test_other_user_denied(self, action):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(OTHER, action, OWNED_BY_USER)

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "NOT_AUTHORIZED"

    def test_resource_required(self):
        with pytest.raises(ValueError):
            authorize(USER, Action.READ_ONE)

    def test_user_edit_excludes_status(self):
        decision = authorize(USER, Action.UPDATE_FIELDS, OWNED_BY_USER)

        assert decision.allowed_fields == frozenset({"title", "description", "category"})

    def test_admin_edit_includes_status(self):
        decision = authorize(ADMIN, Action.UPDATE_FIELDS, OWNED_BY_USER)

        assert "status" in decision.allowed_fields


class TestUpdateStatus:

    def test_admin_allowed(self):
        assert authorize(ADMIN, Action.UPDATE_STATUS).allowed_fields == frozenset({"status"})

    def test_owner_denied(self):
        """Ownership does not grant status changes"""
        with pytest.raises(AuthorizationError):
            authorize(USER, Action.UPDATE_STATUS, OWNED_BY_USER)

    def test_user_denied_without_resource(self):
        with pytest.raises(AuthorizationError):
            authorize(USER, Action.UPDATE_STATUS)


class TestFilterPatch:

    def test_user_status_dropped(self):
        patch = {"title": "New", "status": "Resolved"}

        assert filter_patch(USER, patch) == {"title": "New"}

    def test_admin_status_kept(self):
        patch = {"title": "New", "status": "Resolved"}

        assert filter_patch(ADMIN, patch) == patch

    def test_unknown_fields_dropped(self):
        assert filter_patch(ADMIN, {"owner_id": "u2", "category": "Billing"}) == {"category": "Billing"}

    def test_empty_patch(self):
        assert filter_patch(USER, {}) == {}

    def test_input_not_mutated(self):
        patch = {"status": "Resolved"}
        filter_patch(USER, patch)

        assert patch == {"status": "Resolved"}
