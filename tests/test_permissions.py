# tests/test_permissions.py

import pytest

from services.permissions import has_permission

ACTIONS = ["canCreate", "canRead", "canEdit", "canDelete", "canApprove", "canExport"]


@pytest.mark.parametrize("action", ACTIONS)
def test_admin_has_every_right(action):
    assert has_permission("Admin", "quotes", action)


@pytest.mark.parametrize("action", ACTIONS)
def test_designer_cannot_delete(action):
    assert has_permission("Designer", "products", action) is (action != "canDelete")


@pytest.mark.parametrize("action", ACTIONS)
def test_client_reads_and_approves_only(action):
    assert has_permission("Client", "quotes", action) is (action in ("canRead", "canApprove"))


def test_unknown_role_has_no_rights():
    assert not has_permission("Guest", "quotes", "canRead")
    assert not has_permission("", "clients", "canRead")
