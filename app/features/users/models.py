"""
User account model with ULID primary keys.
"""
from typing import Any, Dict
from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, UlidPrimaryKeyMixin


class User(Base, UlidPrimaryKeyMixin, TimestampMixin):
    """
    A user account within one authentication data source.

    The same username may exist independently in several data sources.
    """
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("data_source", "username", name="uq_user_data_source_username"),
    )

    data_source: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Salted SHA-256, both hex encoded
    password_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    password_salt: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Free-form account attributes (full name, email address, ...)
    attributes: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, data_source={self.data_source!r}, username={self.username!r})>"
