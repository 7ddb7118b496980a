"""
Staged permission changes for one account.

The engine accumulates two permission sets, ``added`` and ``removed``, that
together describe how the account's permissions should differ from what it
currently holds. Toggling a permission back to its original state cancels
the pending change instead of recording a redundant one, so a triple is
never present in both sets and the diff stays minimal.
"""
from typing import Optional

from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionKind,
    PermissionSet,
    SystemPermissionType,
    coerce_kind,
)
from app.features.permissions.schemas import PermissionSetSchema, StagedChangeSchema
from app.utils import get_logger


log = get_logger(__name__)


class PermissionStagingEngine:
    """
    Convert permission toggles into an add/remove diff.

    Usage:
        engine = PermissionStagingEngine()
        engine.toggle_user(ObjectPermissionType.UPDATE, "bob", False)
        engine.toggle_user(ObjectPermissionType.UPDATE, "bob", True)
        assert not engine.has_changes()
    """

    def __init__(self):
        self.added = PermissionSet()
        self.removed = PermissionSet()

    def toggle(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str] = None,
        granted: bool = True,
    ) -> None:
        """
        Record that the given permission should be granted or revoked.

        Granting a permission that is pending removal simply un-removes it.
        Revoking a permission that is pending addition simply un-adds it.
        """
        category = PermissionCategory(category)
        kind = coerce_kind(category, kind)
        if granted:
            if self.removed.remove(category, kind, identifier):
                log.debug("Cancelled pending removal of %s %s %s", category.value, kind.value, identifier)
            else:
                self.added.add(category, kind, identifier)
                log.debug("Staged addition of %s %s %s", category.value, kind.value, identifier)
        else:
            if self.added.remove(category, kind, identifier):
                log.debug("Cancelled pending addition of %s %s %s", category.value, kind.value, identifier)
            else:
                self.removed.add(category, kind, identifier)
                log.debug("Staged removal of %s %s %s", category.value, kind.value, identifier)

    def toggle_system(self, kind: SystemPermissionType, granted: bool) -> None:
        self.toggle(PermissionCategory.SYSTEM, kind, None, granted)

    def toggle_user(self, kind: ObjectPermissionType, identifier: str, granted: bool) -> None:
        self.toggle(PermissionCategory.USER, kind, identifier, granted)

    def toggle_connection(self, identifier: str, granted: bool) -> None:
        # Only READ is editable for connections
        self.toggle(PermissionCategory.CONNECTION, ObjectPermissionType.READ, identifier, granted)

    def toggle_connection_group(self, identifier: str, granted: bool) -> None:
        self.toggle(PermissionCategory.CONNECTION_GROUP, ObjectPermissionType.READ, identifier, granted)

    def has_changes(self) -> bool:
        return not (self.added.is_empty() and self.removed.is_empty())

    def reset(self) -> None:
        """Drop every staged change."""
        self.added = PermissionSet()
        self.removed = PermissionSet()

    def snapshot(self) -> StagedChangeSchema:
        return StagedChangeSchema(
            added=PermissionSetSchema.from_permission_set(self.added),
            removed=PermissionSetSchema.from_permission_set(self.removed),
        )
