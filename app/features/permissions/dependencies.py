"""
Authorization checks for managing user accounts.

Every check takes the permissions of the operator doing the editing (the
principal), the username of the edited account (the target) and whether
that account already exists. Permissions of None mean they have not been
loaded yet, and every check then denies.

Precedence, first match wins:
1. System ADMINISTER allows everything except deleting an account that
   does not exist.
2. Creating an account requires system CREATE_USER.
3. Saving an existing account requires UPDATE on that account.
4. Deleting requires DELETE on that account.
5. Changing another account's permissions requires ADMINISTER on that
   account, which UPDATE does not imply.
6. System permissions can only be changed by a system administrator.
"""
from typing import Optional

from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionSet,
    SystemPermissionType,
)


def is_system_administrator(permissions: Optional[PermissionSet]) -> bool:
    return permissions is not None and permissions.has_system_permission(SystemPermissionType.ADMINISTER)


def can_change_attributes(permissions: Optional[PermissionSet], username: Optional[str], exists: bool) -> bool:
    """Whether the principal may edit the target's attributes."""
    if permissions is None:
        return False

    # Attributes can always be set while creating the account
    if not exists:
        return True

    if is_system_administrator(permissions):
        return True

    return permissions.has_user_permission(ObjectPermissionType.UPDATE, username)


def can_change_permissions(permissions: Optional[PermissionSet], username: Optional[str], exists: bool) -> bool:
    """Whether the principal may change the target's permissions."""
    if permissions is None:
        return False

    # Permissions can always be set while creating the account
    if not exists:
        return True

    if is_system_administrator(permissions):
        return True

    # Requires explicit ADMINISTER on the account, UPDATE is not enough
    return permissions.has_user_permission(ObjectPermissionType.ADMINISTER, username)


def can_change_system_permissions(permissions: Optional[PermissionSet]) -> bool:
    """Only system administrators may grant or revoke system permissions."""
    return is_system_administrator(permissions)


def can_grant_object_permission(
    permissions: Optional[PermissionSet],
    category: PermissionCategory,
    identifier: str,
) -> bool:
    """
    Whether the principal may hand out access to the given object.

    System administrators may grant access to anything. Anyone else needs
    ADMINISTER on the object itself.
    """
    if permissions is None:
        return False

    if is_system_administrator(permissions):
        return True

    return permissions.has(category, ObjectPermissionType.ADMINISTER, identifier)


def can_edit_username(username: Optional[str]) -> bool:
    """The username can only be chosen when creating a new account."""
    return not username


def can_save_user(permissions: Optional[PermissionSet], username: Optional[str], exists: bool) -> bool:
    if permissions is None:
        return False

    if is_system_administrator(permissions):
        return True

    # Creating requires CREATE_USER rather than any per-account permission
    if not exists:
        return permissions.has_system_permission(SystemPermissionType.CREATE_USER)

    return permissions.has_user_permission(ObjectPermissionType.UPDATE, username)


def can_delete_user(permissions: Optional[PermissionSet], username: Optional[str], exists: bool) -> bool:
    if permissions is None:
        return False

    # Can't delete what doesn't exist
    if not exists:
        return False

    if is_system_administrator(permissions):
        return True

    return permissions.has_user_permission(ObjectPermissionType.DELETE, username)


def is_read_only(permissions: Optional[PermissionSet], username: Optional[str], exists: bool) -> bool:
    """An account is read-only exactly when it cannot be saved."""
    return not can_save_user(permissions, username, exists)
