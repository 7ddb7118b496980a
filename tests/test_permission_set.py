"""Tests for permission sets and their serialized form."""

from app.features.permissions.flags import PermissionFlagSet
from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionSet,
    SystemPermissionType,
)
from app.features.permissions.schemas import PermissionSetSchema


class TestPermissionSet:

    def test_add_and_remove_object_permission(self):
        permissions = PermissionSet()

        assert permissions.add_user_permission(ObjectPermissionType.UPDATE, "bob") is True
        assert permissions.add_user_permission(ObjectPermissionType.UPDATE, "bob") is False
        assert permissions.has_user_permission(ObjectPermissionType.UPDATE, "bob")
        assert not permissions.has_user_permission(ObjectPermissionType.UPDATE, "alice")
        assert not permissions.has_user_permission(ObjectPermissionType.DELETE, "bob")

        assert permissions.remove_user_permission(ObjectPermissionType.UPDATE, "bob") is True
        assert permissions.remove_user_permission(ObjectPermissionType.UPDATE, "bob") is False
        assert permissions == PermissionSet()

    def test_empty_identifier_sets_are_pruned(self):
        permissions = PermissionSet()
        permissions.add_connection_permission(ObjectPermissionType.READ, "1")
        permissions.remove_connection_permission(ObjectPermissionType.READ, "1")

        assert permissions.connection_permissions == {}
        assert permissions.is_empty()

    def test_system_and_object_administer_are_distinct(self):
        permissions = PermissionSet()
        permissions.add_user_permission(ObjectPermissionType.ADMINISTER, "bob")

        assert not permissions.has_system_permission(SystemPermissionType.ADMINISTER)

        permissions.add_system_permission(SystemPermissionType.ADMINISTER)
        permissions.remove_user_permission(ObjectPermissionType.ADMINISTER, "bob")

        assert permissions.has_system_permission(SystemPermissionType.ADMINISTER)
        assert permissions.user_permissions == {}

    def test_categories_are_independent(self):
        permissions = PermissionSet()
        permissions.add_connection_permission(ObjectPermissionType.READ, "7")

        assert not permissions.has_connection_group_permission(ObjectPermissionType.READ, "7")
        assert not permissions.has_user_permission(ObjectPermissionType.READ, "7")

    def test_entries_are_ordered_and_complete(self):
        permissions = PermissionSet()
        permissions.add_connection_group_permission(ObjectPermissionType.READ, "g1")
        permissions.add_user_permission(ObjectPermissionType.UPDATE, "bob")
        permissions.add_system_permission(SystemPermissionType.CREATE_USER)
        permissions.add_user_permission(ObjectPermissionType.READ, "bob")

        assert list(permissions.entries()) == [
            (PermissionCategory.SYSTEM, SystemPermissionType.CREATE_USER, None),
            (PermissionCategory.USER, ObjectPermissionType.READ, "bob"),
            (PermissionCategory.USER, ObjectPermissionType.UPDATE, "bob"),
            (PermissionCategory.CONNECTION_GROUP, ObjectPermissionType.READ, "g1"),
        ]
        assert len(permissions) == 4

    def test_copy_is_independent(self):
        permissions = PermissionSet()
        permissions.add_user_permission(ObjectPermissionType.READ, "bob")

        copied = permissions.copy()
        copied.add_user_permission(ObjectPermissionType.READ, "alice")

        assert copied != permissions
        assert not permissions.has_user_permission(ObjectPermissionType.READ, "alice")


class TestPermissionSetSchema:

    def test_serializes_with_camel_case_keys(self):
        permissions = PermissionSet()
        permissions.add_system_permission(SystemPermissionType.CREATE_CONNECTION)
        permissions.add_user_permission(ObjectPermissionType.UPDATE, "bob")
        permissions.add_connection_permission(ObjectPermissionType.READ, "42")

        dumped = PermissionSetSchema.from_permission_set(permissions).model_dump(by_alias=True, mode="json")

        assert dumped == {
            "systemPermissions": ["CREATE_CONNECTION"],
            "userPermissions": {"bob": ["UPDATE"]},
            "connectionPermissions": {"42": ["READ"]},
            "connectionGroupPermissions": {},
        }

    def test_parses_client_payload(self):
        schema = PermissionSetSchema.model_validate({
            "systemPermissions": ["ADMINISTER"],
            "connectionGroupPermissions": {"root": ["READ", "ADMINISTER"]},
        })

        permissions = schema.to_permission_set()

        assert permissions.has_system_permission(SystemPermissionType.ADMINISTER)
        assert permissions.has_connection_group_permission(ObjectPermissionType.ADMINISTER, "root")
        assert len(permissions) == 3


class TestPermissionFlagSet:

    def test_flags_mirror_baseline(self):
        baseline = PermissionSet()
        baseline.add_user_permission(ObjectPermissionType.UPDATE, "bob")

        flags = PermissionFlagSet.from_permission_set(baseline)

        assert flags.get(PermissionCategory.USER, ObjectPermissionType.UPDATE, "bob") is True
        assert flags.get(PermissionCategory.USER, ObjectPermissionType.DELETE, "bob") is False
        assert flags.get(PermissionCategory.SYSTEM, SystemPermissionType.ADMINISTER) is False

    def test_unticked_flags_drop_out_of_permission_set(self):
        flags = PermissionFlagSet()
        flags.set(PermissionCategory.CONNECTION, ObjectPermissionType.READ, "1", True)
        flags.set(PermissionCategory.CONNECTION, ObjectPermissionType.READ, "2", False)
        flags.set(PermissionCategory.SYSTEM, SystemPermissionType.CREATE_USER, None, True)

        permissions = flags.to_permission_set()

        assert list(permissions.entries()) == [
            (PermissionCategory.SYSTEM, SystemPermissionType.CREATE_USER, None),
            (PermissionCategory.CONNECTION, ObjectPermissionType.READ, "1"),
        ]
