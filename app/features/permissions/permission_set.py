"""
Permission sets over the four permission categories.

A PermissionSet holds:
- system permissions, a set of SystemPermissionType
- user, connection and connection group permissions, each a mapping from
  ObjectPermissionType to the identifiers of the objects it applies to

Each (category, kind, identifier) triple is present at most once. Inner
identifier sets are dropped as soon as they become empty, so two sets that
grant the same things always compare equal.
"""
import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Set, Tuple, Union


class SystemPermissionType(str, enum.Enum):
    """Permissions that apply to the system as a whole."""
    ADMINISTER = "ADMINISTER"
    CREATE_USER = "CREATE_USER"
    CREATE_CONNECTION = "CREATE_CONNECTION"
    CREATE_CONNECTION_GROUP = "CREATE_CONNECTION_GROUP"


class ObjectPermissionType(str, enum.Enum):
    """Permissions that apply to one specific object."""
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ADMINISTER = "ADMINISTER"


class PermissionCategory(str, enum.Enum):
    SYSTEM = "system"
    USER = "user"
    CONNECTION = "connection"
    CONNECTION_GROUP = "connectionGroup"


OBJECT_CATEGORIES = (
    PermissionCategory.USER,
    PermissionCategory.CONNECTION,
    PermissionCategory.CONNECTION_GROUP,
)

PermissionKind = Union[SystemPermissionType, ObjectPermissionType]
PermissionEntry = Tuple[PermissionCategory, PermissionKind, Optional[str]]
ObjectPermissions = Dict[ObjectPermissionType, Set[str]]


def coerce_kind(category: PermissionCategory, kind: PermissionKind) -> PermissionKind:
    """Return kind as the enumeration matching the given category."""
    if PermissionCategory(category) == PermissionCategory.SYSTEM:
        return SystemPermissionType(kind)
    return ObjectPermissionType(kind)


@dataclass
class PermissionSet:
    system_permissions: Set[SystemPermissionType] = field(default_factory=set)
    user_permissions: ObjectPermissions = field(default_factory=dict)
    connection_permissions: ObjectPermissions = field(default_factory=dict)
    connection_group_permissions: ObjectPermissions = field(default_factory=dict)

    def _objects(self, category: PermissionCategory) -> ObjectPermissions:
        if category == PermissionCategory.USER:
            return self.user_permissions
        if category == PermissionCategory.CONNECTION:
            return self.connection_permissions
        if category == PermissionCategory.CONNECTION_GROUP:
            return self.connection_group_permissions
        raise ValueError(f"{category} has no object permissions")

    # ------------------------------------------------------------------
    # Generic access by category
    # ------------------------------------------------------------------

    def has(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str] = None,
    ) -> bool:
        """Return whether the given permission is present in this set."""
        category = PermissionCategory(category)
        if category == PermissionCategory.SYSTEM:
            return SystemPermissionType(kind) in self.system_permissions
        return identifier in self._objects(category).get(ObjectPermissionType(kind), ())

    def add(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str] = None,
    ) -> bool:
        """
        Add the given permission.

        Returns:
            True if the set changed, False if the permission was already present
        """
        if self.has(category, kind, identifier):
            return False
        category = PermissionCategory(category)
        if category == PermissionCategory.SYSTEM:
            self.system_permissions.add(SystemPermissionType(kind))
        else:
            self._objects(category).setdefault(ObjectPermissionType(kind), set()).add(identifier)
        return True

    def remove(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str] = None,
    ) -> bool:
        """
        Remove the given permission.

        Returns:
            True if the set changed, False if the permission was not present
        """
        if not self.has(category, kind, identifier):
            return False
        category = PermissionCategory(category)
        if category == PermissionCategory.SYSTEM:
            self.system_permissions.discard(SystemPermissionType(kind))
            return True

        objects = self._objects(category)
        kind = ObjectPermissionType(kind)
        objects[kind].discard(identifier)
        if not objects[kind]:
            del objects[kind]
        return True

    # ------------------------------------------------------------------
    # Category helpers
    # ------------------------------------------------------------------

    def has_system_permission(self, kind: SystemPermissionType) -> bool:
        return self.has(PermissionCategory.SYSTEM, kind)

    def has_user_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.has(PermissionCategory.USER, kind, identifier)

    def has_connection_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.has(PermissionCategory.CONNECTION, kind, identifier)

    def has_connection_group_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.has(PermissionCategory.CONNECTION_GROUP, kind, identifier)

    def add_system_permission(self, kind: SystemPermissionType) -> bool:
        return self.add(PermissionCategory.SYSTEM, kind)

    def add_user_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.add(PermissionCategory.USER, kind, identifier)

    def add_connection_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.add(PermissionCategory.CONNECTION, kind, identifier)

    def add_connection_group_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.add(PermissionCategory.CONNECTION_GROUP, kind, identifier)

    def remove_system_permission(self, kind: SystemPermissionType) -> bool:
        return self.remove(PermissionCategory.SYSTEM, kind)

    def remove_user_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.remove(PermissionCategory.USER, kind, identifier)

    def remove_connection_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.remove(PermissionCategory.CONNECTION, kind, identifier)

    def remove_connection_group_permission(self, kind: ObjectPermissionType, identifier: str) -> bool:
        return self.remove(PermissionCategory.CONNECTION_GROUP, kind, identifier)

    # ------------------------------------------------------------------
    # Whole-set views
    # ------------------------------------------------------------------

    def entries(self) -> Iterator[PermissionEntry]:
        """Iterate over every (category, kind, identifier) triple, in a stable order."""
        for kind in sorted(self.system_permissions, key=lambda k: k.value):
            yield PermissionCategory.SYSTEM, kind, None
        for category in OBJECT_CATEGORIES:
            objects = self._objects(category)
            for kind in sorted(objects, key=lambda k: k.value):
                for identifier in sorted(objects[kind]):
                    yield category, kind, identifier

    def is_empty(self) -> bool:
        return not self.system_permissions and not any(
            self._objects(category) for category in OBJECT_CATEGORIES
        )

    def copy(self) -> "PermissionSet":
        copied = PermissionSet()
        for category, kind, identifier in self.entries():
            copied.add(category, kind, identifier)
        return copied

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())
