"""Tests for the checks deciding who may edit which account."""

import pytest

from app.features.permissions import dependencies
from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionSet,
    SystemPermissionType,
)


@pytest.fixture
def administrator():
    permissions = PermissionSet()
    permissions.add_system_permission(SystemPermissionType.ADMINISTER)
    return permissions


@pytest.fixture
def updater():
    """Holds UPDATE on alice and nothing else."""
    permissions = PermissionSet()
    permissions.add_user_permission(ObjectPermissionType.UPDATE, "alice")
    return permissions


class TestAuthorization:

    def test_update_on_target_allows_save_but_not_system_permissions(self, updater):
        assert dependencies.can_save_user(updater, "alice", exists=True) is True
        assert dependencies.can_change_system_permissions(updater) is False
        assert dependencies.is_read_only(updater, "alice", exists=True) is False

    def test_update_is_scoped_to_its_target(self, updater):
        assert dependencies.can_save_user(updater, "bob", exists=True) is False
        assert dependencies.is_read_only(updater, "bob", exists=True) is True

    def test_update_does_not_allow_changing_permissions(self, updater):
        assert dependencies.can_change_permissions(updater, "alice", exists=True) is False

        updater.add_user_permission(ObjectPermissionType.ADMINISTER, "alice")

        assert dependencies.can_change_permissions(updater, "alice", exists=True) is True

    def test_system_administrator_may_do_anything_to_existing_accounts(self, administrator):
        assert dependencies.can_save_user(administrator, "bob", exists=True)
        assert dependencies.can_delete_user(administrator, "bob", exists=True)
        assert dependencies.can_change_permissions(administrator, "bob", exists=True)
        assert dependencies.can_change_attributes(administrator, "bob", exists=True)
        assert dependencies.can_change_system_permissions(administrator)

    def test_nonexistent_account_can_never_be_deleted(self, administrator):
        assert dependencies.can_delete_user(administrator, "ghost", exists=False) is False

    def test_delete_requires_explicit_delete(self, updater):
        assert dependencies.can_delete_user(updater, "alice", exists=True) is False

        updater.add_user_permission(ObjectPermissionType.DELETE, "alice")

        assert dependencies.can_delete_user(updater, "alice", exists=True) is True

    def test_creating_requires_create_user(self, updater):
        assert dependencies.can_save_user(updater, "alice", exists=False) is False

        updater.add_system_permission(SystemPermissionType.CREATE_USER)

        assert dependencies.can_save_user(updater, "alice", exists=False) is True
        assert dependencies.can_save_user(updater, None, exists=False) is True

    def test_new_accounts_are_editable_before_they_exist(self):
        nothing = PermissionSet()

        assert dependencies.can_change_attributes(nothing, "new", exists=False) is True
        assert dependencies.can_change_permissions(nothing, "new", exists=False) is True
        assert dependencies.can_save_user(nothing, "new", exists=False) is False

    def test_unloaded_permissions_deny_everything(self):
        assert dependencies.can_change_attributes(None, "bob", exists=False) is False
        assert dependencies.can_change_permissions(None, "bob", exists=False) is False
        assert dependencies.can_change_system_permissions(None) is False
        assert dependencies.can_save_user(None, "bob", exists=True) is False
        assert dependencies.can_delete_user(None, "bob", exists=True) is False
        assert dependencies.is_read_only(None, "bob", exists=True) is True

    def test_username_editable_only_when_creating(self):
        assert dependencies.can_edit_username(None) is True
        assert dependencies.can_edit_username("") is True
        assert dependencies.can_edit_username("bob") is False

    def test_object_grant_requires_administer_on_object(self, updater, administrator):
        assert dependencies.can_grant_object_permission(updater, PermissionCategory.CONNECTION, "1") is False

        updater.add_connection_permission(ObjectPermissionType.ADMINISTER, "1")

        assert dependencies.can_grant_object_permission(updater, PermissionCategory.CONNECTION, "1") is True
        assert dependencies.can_grant_object_permission(updater, PermissionCategory.CONNECTION_GROUP, "1") is False
        assert dependencies.can_grant_object_permission(administrator, PermissionCategory.CONNECTION_GROUP, "1")
