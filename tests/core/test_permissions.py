"""Tests for role-based capability checks."""

import pytest

from branchstock.core.entities import Actor, Role
from branchstock.core.exceptions import PermissionDeniedError
from branchstock.core.services.permissions import (
    Capability,
    ensure_capability,
    has_capability,
)


class TestAdmin:
    @pytest.mark.parametrize("capability", list(Capability))
    def test_admin_holds_everything(self, admin, capability):
        assert has_capability(admin, capability, "any-branch")


class TestManager:
    @pytest.mark.parametrize(
        "capability",
        [c for c in Capability if c != Capability.DELETE_TRANSFER],
    )
    def test_own_branch_allowed(self, manager_jkt, capability):
        assert has_capability(manager_jkt, capability, "jkt")

    def test_other_branch_denied(self, manager_jkt):
        assert not has_capability(manager_jkt, Capability.ISSUE_STOCK, "sby")

    def test_delete_is_admin_only(self, manager_jkt):
        assert not has_capability(manager_jkt, Capability.DELETE_TRANSFER, "jkt")
        assert not has_capability(manager_jkt, Capability.DELETE_TRANSFER)

    def test_unassigned_manager_denied(self):
        actor = Actor(role=Role.MANAGER)
        assert not has_capability(actor, Capability.RECEIVE_STOCK, "jkt")


class TestEnsureCapability:
    def test_passes_silently(self, manager_jkt):
        ensure_capability(manager_jkt, Capability.RECEIVE_STOCK, "jkt")

    def test_raises_with_details(self, manager_jkt):
        with pytest.raises(PermissionDeniedError) as exc_info:
            ensure_capability(manager_jkt, Capability.ISSUE_STOCK, "sby")

        err = exc_info.value
        assert err.code == "PERMISSION_DENIED"
        assert err.details == {
            "role": "manager",
            "capability": "ledger:issue",
            "branch_id": "sby",
        }
