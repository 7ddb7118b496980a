"""
User directory service.

Each call opens its own session and either completes or returns a Failure
with the reason; nothing is retried automatically.
"""
from typing import Optional
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.engine import AsyncSessionLocal
from app.core.result import Failure, Result, Success
from app.features.permissions.service import PermissionService
from app.features.users.auth import hash_password
from app.features.users.models import User
from app.features.users.schemas import UserData
from app.utils import get_logger


log = get_logger(__name__)


class UserDirectoryService:

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory

    async def get(self, data_source: str, username: str) -> Optional[UserData]:
        """Get an account, or None if it does not exist or cannot be read."""
        try:
            async with self._session_factory() as db:
                user = await self._find(db, data_source, username)
        except SQLAlchemyError as e:
            log.warning("Unable to read user %s from %s: %s", username, data_source, e)
            return None

        if user is None:
            return None
        return UserData(username=user.username, attributes=dict(user.attributes or {}))

    async def create(self, data_source: str, user: UserData) -> Result[None]:
        if not user.username:
            return Failure("A username is required")

        record = User(
            data_source=data_source,
            username=user.username,
            attributes=dict(user.attributes),
        )
        if user.password is not None:
            record.password_hash, record.password_salt = hash_password(user.password)

        try:
            async with self._session_factory() as db:
                async with db.begin():
                    db.add(record)
        except IntegrityError:
            log.info("User %s already exists in %s", user.username, data_source)
            return Failure(f"User \"{user.username}\" already exists")
        except SQLAlchemyError as e:
            log.error("Failed to create user %s in %s: %s", user.username, data_source, e)
            return Failure(str(e))

        log.info("Created user %s in %s", user.username, data_source)
        return Success()

    async def save(self, data_source: str, user: UserData) -> Result[None]:
        """Update an existing account. A password of None keeps the current one."""
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    record = await self._find(db, data_source, user.username)
                    if record is None:
                        return Failure(f"No such user: \"{user.username}\"")

                    record.attributes = dict(user.attributes)
                    if user.password is not None:
                        record.password_hash, record.password_salt = hash_password(user.password)
        except SQLAlchemyError as e:
            log.error("Failed to save user %s in %s: %s", user.username, data_source, e)
            return Failure(str(e))

        log.info("Saved user %s in %s", user.username, data_source)
        return Success()

    async def delete(self, data_source: str, user: UserData) -> Result[None]:
        """Delete an account along with every permission it holds."""
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    record = await self._find(db, data_source, user.username)
                    if record is None:
                        return Failure(f"No such user: \"{user.username}\"")

                    await PermissionService(self._session_factory).revoke_all(db, data_source, user.username)
                    await db.delete(record)
        except SQLAlchemyError as e:
            log.error("Failed to delete user %s in %s: %s", user.username, data_source, e)
            return Failure(str(e))

        log.info("Deleted user %s from %s", user.username, data_source)
        return Success()

    async def _find(self, db: AsyncSession, data_source: str, username: Optional[str]) -> Optional[User]:
        result = await db.execute(
            select(User).where(and_(User.data_source == data_source, User.username == username))
        )
        return result.scalar_one_or_none()
