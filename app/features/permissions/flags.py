"""
Checkbox state for a permission editor.

A PermissionFlagSet starts as a copy of the edited account's baseline
permissions and then tracks whatever the operator has ticked or unticked.
Flags that were never set read as False.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from app.features.permissions.permission_set import (
    OBJECT_CATEGORIES,
    ObjectPermissionType,
    PermissionCategory,
    PermissionKind,
    PermissionSet,
    SystemPermissionType,
)


ObjectFlags = Dict[ObjectPermissionType, Dict[str, bool]]


@dataclass
class PermissionFlagSet:
    system_permissions: Dict[SystemPermissionType, bool] = field(default_factory=dict)
    user_permissions: ObjectFlags = field(default_factory=dict)
    connection_permissions: ObjectFlags = field(default_factory=dict)
    connection_group_permissions: ObjectFlags = field(default_factory=dict)

    @classmethod
    def from_permission_set(cls, permissions: PermissionSet) -> "PermissionFlagSet":
        """Create flags with every permission in the given set ticked."""
        flags = cls()
        for category, kind, identifier in permissions.entries():
            flags.set(category, kind, identifier, True)
        return flags

    def _objects(self, category: PermissionCategory) -> ObjectFlags:
        return {
            PermissionCategory.USER: self.user_permissions,
            PermissionCategory.CONNECTION: self.connection_permissions,
            PermissionCategory.CONNECTION_GROUP: self.connection_group_permissions,
        }[PermissionCategory(category)]

    def get(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str] = None,
    ) -> bool:
        if PermissionCategory(category) == PermissionCategory.SYSTEM:
            return self.system_permissions.get(SystemPermissionType(kind), False)
        return self._objects(category).get(ObjectPermissionType(kind), {}).get(identifier, False)

    def set(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str],
        value: bool,
    ) -> None:
        if PermissionCategory(category) == PermissionCategory.SYSTEM:
            self.system_permissions[SystemPermissionType(kind)] = value
            return
        self._objects(category).setdefault(ObjectPermissionType(kind), {})[identifier] = value

    def to_permission_set(self) -> PermissionSet:
        """The permissions that are currently ticked."""
        permissions = PermissionSet()
        for kind, value in self.system_permissions.items():
            if value:
                permissions.add_system_permission(kind)
        for category in OBJECT_CATEGORIES:
            for kind, identifiers in self._objects(category).items():
                for identifier, value in identifiers.items():
                    if value:
                        permissions.add(category, kind, identifier)
        return permissions
