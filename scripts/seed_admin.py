"""
Seed script to create the initial administrator account.

Run this script once against a fresh database to create, in every
configured data source:
- the administrator account (ADMIN_USERNAME / ADMIN_PASSWORD)
- every system permission for that account

Existing accounts are left untouched.

Usage:
    ADMIN_PASSWORD=changeme uv run python -m scripts.seed_admin
"""
import asyncio

from app.core import config
from app.core.database.engine import init_db
from app.core.result import Failure
from app.features.permissions.permission_set import PermissionSet, SystemPermissionType
from app.features.permissions.service import PermissionService
from app.features.users.schemas import UserData
from app.features.users.service import UserDirectoryService
from app.utils import get_logger


log = get_logger(__name__)


async def seed_admin(data_source: str, users: UserDirectoryService, permissions: PermissionService) -> bool:
    """
    Create the administrator in one data source.

    Returns:
        True if the account was created, False if it already existed
    """
    if await users.get(data_source, config.ADMIN_USERNAME) is not None:
        log.info("User '%s' already exists in %s, skipping", config.ADMIN_USERNAME, data_source)
        return False

    result = await users.create(
        data_source,
        UserData(username=config.ADMIN_USERNAME, password=config.ADMIN_PASSWORD),
    )
    if isinstance(result, Failure):
        raise RuntimeError(result.message)

    granted = PermissionSet(system_permissions=set(SystemPermissionType))
    result = await permissions.apply_diff(data_source, config.ADMIN_USERNAME, granted, PermissionSet())
    if isinstance(result, Failure):
        raise RuntimeError(result.message)

    log.info("Created administrator '%s' in %s", config.ADMIN_USERNAME, data_source)
    return True


async def main():
    """Create tables, then the administrator in every data source."""
    if not config.ADMIN_PASSWORD:
        log.error("ADMIN_PASSWORD must be set")
        raise SystemExit(1)

    log.info("Initializing database tables...")
    await init_db()

    users = UserDirectoryService()
    permissions = PermissionService()
    for data_source in config.DATA_SOURCES:
        try:
            await seed_admin(data_source, users, permissions)
        except Exception as e:
            log.error("Error seeding %s: %s", data_source, e, exc_info=True)
            raise

    log.info("Administrator seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
