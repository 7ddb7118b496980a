"""
Permission read/write service.

Loads the permissions an account holds and applies staged add/remove diffs
to them. A diff is applied in a single transaction: either every change is
stored or none is.
"""
from sqlalchemy import and_, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.engine import AsyncSessionLocal
from app.core.result import Failure, Result, Success
from app.features.permissions.models import ObjectPermissionGrant, SystemPermissionGrant
from app.features.permissions.permission_set import (
    PermissionCategory,
    PermissionEntry,
    PermissionSet,
)
from app.utils import get_logger


log = get_logger(__name__)


class PermissionService:
    """
    Usage:
        service = PermissionService()
        result = await service.load("default", "alice")
        if result.ok:
            permissions = result.value
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory

    async def load(self, data_source: str, username: str) -> Result[PermissionSet]:
        """Get every permission the account holds in the data source."""
        permissions = PermissionSet()
        try:
            async with self._session_factory() as db:
                system_rows = await db.execute(
                    select(SystemPermissionGrant.permission).where(
                        and_(
                            SystemPermissionGrant.data_source == data_source,
                            SystemPermissionGrant.username == username,
                        )
                    )
                )
                for permission in system_rows.scalars():
                    permissions.add_system_permission(permission)

                object_rows = await db.execute(
                    select(
                        ObjectPermissionGrant.category,
                        ObjectPermissionGrant.permission,
                        ObjectPermissionGrant.object_identifier,
                    ).where(
                        and_(
                            ObjectPermissionGrant.data_source == data_source,
                            ObjectPermissionGrant.username == username,
                        )
                    )
                )
                for category, permission, identifier in object_rows:
                    permissions.add(category, permission, identifier)
        except SQLAlchemyError as e:
            log.warning("Unable to load permissions of %s in %s: %s", username, data_source, e)
            return Failure(str(e))

        log.debug("Loaded %d permissions of %s in %s", len(permissions), username, data_source)
        return Success(permissions)

    async def apply_diff(
        self,
        data_source: str,
        username: str,
        added: PermissionSet,
        removed: PermissionSet,
    ) -> Result[None]:
        """
        Grant everything in added and revoke everything in removed.

        Granting a permission already held, or revoking one not held, is a no-op.
        """
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    for entry in added.entries():
                        await self._grant(db, data_source, username, entry)
                    for entry in removed.entries():
                        await self._revoke(db, data_source, username, entry)
        except SQLAlchemyError as e:
            log.error("Failed to update permissions of %s in %s: %s", username, data_source, e)
            return Failure(str(e))

        log.info(
            "Updated permissions of %s in %s: %d added, %d removed",
            username, data_source, len(added), len(removed),
        )
        return Success()

    async def revoke_all(self, db: AsyncSession, data_source: str, username: str) -> None:
        """Drop every grant the account holds. Runs inside the caller's transaction."""
        await db.execute(
            delete(SystemPermissionGrant).where(
                and_(
                    SystemPermissionGrant.data_source == data_source,
                    SystemPermissionGrant.username == username,
                )
            )
        )
        await db.execute(
            delete(ObjectPermissionGrant).where(
                and_(
                    ObjectPermissionGrant.data_source == data_source,
                    ObjectPermissionGrant.username == username,
                )
            )
        )

    async def _grant(self, db: AsyncSession, data_source: str, username: str, entry: PermissionEntry) -> None:
        category, kind, identifier = entry
        if await self._find(db, data_source, username, entry) is not None:
            return

        if category == PermissionCategory.SYSTEM:
            db.add(SystemPermissionGrant(data_source=data_source, username=username, permission=kind))
        else:
            db.add(ObjectPermissionGrant(
                data_source=data_source,
                username=username,
                category=category,
                permission=kind,
                object_identifier=identifier,
            ))
        # Flush so a later lookup in the same diff sees the new row
        await db.flush()

    async def _revoke(self, db: AsyncSession, data_source: str, username: str, entry: PermissionEntry) -> None:
        grant = await self._find(db, data_source, username, entry)
        if grant is not None:
            await db.delete(grant)
            await db.flush()

    async def _find(self, db: AsyncSession, data_source: str, username: str, entry: PermissionEntry):
        category, kind, identifier = entry
        if category == PermissionCategory.SYSTEM:
            stmt = select(SystemPermissionGrant).where(
                and_(
                    SystemPermissionGrant.data_source == data_source,
                    SystemPermissionGrant.username == username,
                    SystemPermissionGrant.permission == kind,
                )
            )
        else:
            stmt = select(ObjectPermissionGrant).where(
                and_(
                    ObjectPermissionGrant.data_source == data_source,
                    ObjectPermissionGrant.username == username,
                    ObjectPermissionGrant.category == category,
                    ObjectPermissionGrant.permission == kind,
                    ObjectPermissionGrant.object_identifier == identifier,
                )
            )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()
