"""
Permission grant tables.

Grants are stored per data source and per account username:
- system_permissions: one row per system permission held
- object_permissions: one row per (category, permission, object) held

Unique constraints enforce the set semantics of a PermissionSet.
"""
from sqlalchemy import String, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, UlidPrimaryKeyMixin
from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    SystemPermissionType,
)


class SystemPermissionGrant(Base, UlidPrimaryKeyMixin, TimestampMixin):
    """A system permission held by an account."""
    __tablename__ = "system_permissions"
    __table_args__ = (
        UniqueConstraint("data_source", "username", "permission", name="uq_system_permission"),
    )

    data_source: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    permission: Mapped[SystemPermissionType] = mapped_column(
        SQLEnum(SystemPermissionType, name="system_permission_type"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SystemPermissionGrant(username={self.username!r}, permission={self.permission.value})>"


class ObjectPermissionGrant(Base, UlidPrimaryKeyMixin, TimestampMixin):
    """
    A permission held by an account on one user, connection or connection group.

    Examples:
    - category=USER, permission=UPDATE, object_identifier="bob"
    - category=CONNECTION, permission=READ, object_identifier="42"
    """
    __tablename__ = "object_permissions"
    __table_args__ = (
        UniqueConstraint(
            "data_source", "username", "category", "permission", "object_identifier",
            name="uq_object_permission",
        ),
    )

    data_source: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    category: Mapped[PermissionCategory] = mapped_column(
        SQLEnum(PermissionCategory, name="permission_category"),
        nullable=False,
    )
    permission: Mapped[ObjectPermissionType] = mapped_column(
        SQLEnum(ObjectPermissionType, name="object_permission_type"),
        nullable=False,
    )
    object_identifier: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<ObjectPermissionGrant(username={self.username!r}, category={self.category.value}, "
            f"permission={self.permission.value}, object={self.object_identifier!r})>"
        )
