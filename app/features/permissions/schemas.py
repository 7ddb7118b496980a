"""
Pydantic schemas for permission sets and staged changes.

The serialized shape uses the four camelCase mappings the permission
service exchanges with clients:
    {
        "systemPermissions": ["CREATE_USER"],
        "userPermissions": {"bob": ["READ", "UPDATE"]},
        "connectionPermissions": {"42": ["READ"]},
        "connectionGroupPermissions": {}
    }
"""
from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field

from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionSet,
    SystemPermissionType,
)


# identifier -> permission types granted on that object
ObjectPermissionMap = Dict[str, List[ObjectPermissionType]]


class PermissionSetSchema(BaseModel):
    """Serialized form of a PermissionSet."""
    system_permissions: List[SystemPermissionType] = Field(default_factory=list, alias="systemPermissions")
    user_permissions: ObjectPermissionMap = Field(default_factory=dict, alias="userPermissions")
    connection_permissions: ObjectPermissionMap = Field(default_factory=dict, alias="connectionPermissions")
    connection_group_permissions: ObjectPermissionMap = Field(
        default_factory=dict, alias="connectionGroupPermissions"
    )

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_permission_set(cls, permissions: PermissionSet) -> "PermissionSetSchema":
        schema = cls()
        targets = {
            PermissionCategory.USER: schema.user_permissions,
            PermissionCategory.CONNECTION: schema.connection_permissions,
            PermissionCategory.CONNECTION_GROUP: schema.connection_group_permissions,
        }
        for category, kind, identifier in permissions.entries():
            if category == PermissionCategory.SYSTEM:
                schema.system_permissions.append(kind)
            else:
                targets[category].setdefault(identifier, []).append(kind)
        return schema

    def to_permission_set(self) -> PermissionSet:
        permissions = PermissionSet()
        for kind in self.system_permissions:
            permissions.add_system_permission(kind)
        sources = {
            PermissionCategory.USER: self.user_permissions,
            PermissionCategory.CONNECTION: self.connection_permissions,
            PermissionCategory.CONNECTION_GROUP: self.connection_group_permissions,
        }
        for category, by_identifier in sources.items():
            for identifier, kinds in by_identifier.items():
                for kind in kinds:
                    permissions.add(category, kind, identifier)
        return permissions


class StagedChangeSchema(BaseModel):
    """Pending permission changes not yet sent to the permission service."""
    added: PermissionSetSchema
    removed: PermissionSetSchema
