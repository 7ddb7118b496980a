"""
Editing session for one user account.

The session loads the edited account from every data source, the
permissions it currently holds in the selected data source (the baseline),
and the permissions of the operator doing the editing. Permission toggles
are checked against the operator's permissions and staged; nothing reaches
the backend until save_user() is called.
"""
import re
from typing import Dict, List, Optional, Set
from urllib.parse import quote

from app.core import config
from app.core.result import Failure
from app.features.manage.errors import AuthorizationDenied, ManageUserError
from app.features.manage.notifications import NotificationCenter, StatusAction, StatusMessage
from app.features.manage.schemas import AccountPage, ManageUserView, SystemPermissionOption
from app.features.permissions import dependencies
from app.features.permissions.flags import PermissionFlagSet
from app.features.permissions.permission_set import (
    ObjectPermissionType,
    PermissionCategory,
    PermissionKind,
    PermissionSet,
    SystemPermissionType,
)
from app.features.permissions.service import PermissionService
from app.features.permissions.staging import PermissionStagingEngine
from app.features.users.schemas import UserData
from app.features.users.service import UserDirectoryService
from app.utils import get_logger


log = get_logger(__name__)

ACTION_ACKNOWLEDGE = "MANAGE_USER.ACTION_ACKNOWLEDGE"
ACTION_DELETE = "MANAGE_USER.ACTION_DELETE"
ACTION_CANCEL = "MANAGE_USER.ACTION_CANCEL"

# System permissions offered by the editor, in display order
SYSTEM_PERMISSION_TYPES = [
    ("MANAGE_USER.FIELD_HEADER_ADMINISTER_SYSTEM", SystemPermissionType.ADMINISTER),
    ("MANAGE_USER.FIELD_HEADER_CREATE_NEW_USERS", SystemPermissionType.CREATE_USER),
    ("MANAGE_USER.FIELD_HEADER_CREATE_NEW_CONNECTIONS", SystemPermissionType.CREATE_CONNECTION),
    ("MANAGE_USER.FIELD_HEADER_CREATE_NEW_CONNECTION_GROUPS", SystemPermissionType.CREATE_CONNECTION_GROUP),
]


def canonicalize(name: str) -> str:
    """Turn an arbitrary name into a translation key fragment."""
    return re.sub(r"[^A-Z0-9]+", "_", name.upper())


class ManageUserSession:
    """
    Usage:
        session = ManageUserSession("admin", "default", "bob")
        await session.load()
        session.set_user_permission(ObjectPermissionType.UPDATE, "alice", True)
        await session.save_user(password_match=None)
    """

    def __init__(
        self,
        current_username: str,
        selected_data_source: str,
        username: Optional[str] = None,
        *,
        data_sources: Optional[List[str]] = None,
        users: Optional[UserDirectoryService] = None,
        permissions: Optional[PermissionService] = None,
        notifications: Optional[NotificationCenter] = None,
    ):
        self.current_username = current_username
        self.selected_data_source = selected_data_source
        self.username = username
        self.data_sources = data_sources if data_sources is not None else list(config.DATA_SOURCES)

        self._users = users or UserDirectoryService()
        self._permissions = permissions or PermissionService()
        self.notifications = notifications or NotificationCenter()

        # Accounts found, by data source; None until loaded
        self.users: Optional[Dict[str, UserData]] = None
        self.user: Optional[UserData] = None
        self.permission_flags: Optional[PermissionFlagSet] = None

        # The operator's own permissions, by data source; None until loaded
        self.permissions: Optional[Dict[str, PermissionSet]] = None

        self.staging = PermissionStagingEngine()

        # Data sources in which this session created the account
        self._created: Set[str] = set()

        # Where the presentation layer should navigate next, if anywhere
        self.location: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        if self.username:
            users = {}
            for data_source in self.data_sources:
                user = await self._users.get(data_source, self.username)
                if user is not None:
                    users[data_source] = user
            self.users = users

            # Skeleton account if it does not exist in the selected data source
            self.user = users.get(self.selected_data_source) or UserData(username=self.username)

            result = await self._permissions.load(self.selected_data_source, self.username)
            if isinstance(result, Failure):
                log.warning("Using empty permissions for %s: %s", self.username, result.message)
                self.permission_flags = PermissionFlagSet()
            else:
                self.permission_flags = PermissionFlagSet.from_permission_set(result.value)
        else:
            # Creating a new account: it exists nowhere and holds nothing
            self.users = {}
            self.user = UserData()
            self.permission_flags = PermissionFlagSet()

        permissions = {}
        for data_source in self.data_sources:
            result = await self._permissions.load(data_source, self.current_username)
            if isinstance(result, Failure):
                log.warning(
                    "Unable to load permissions of %s in %s, denying all: %s",
                    self.current_username, data_source, result.message,
                )
                permissions[data_source] = PermissionSet()
            else:
                permissions[data_source] = result.value
        self.permissions = permissions

    def is_loaded(self) -> bool:
        return (
            self.users is not None
            and self.permission_flags is not None
            and self.permissions is not None
        )

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def _principal(self, data_source: Optional[str]) -> Optional[PermissionSet]:
        if self.permissions is None:
            return None
        return self.permissions.get(data_source or self.selected_data_source)

    def user_exists(self, data_source: Optional[str] = None) -> bool:
        if self.users is None:
            return False
        return (data_source or self.selected_data_source) in self.users

    def _treated_as_existing(self, data_source: Optional[str]) -> bool:
        """An account created by this session is still authorized as a new one."""
        return self.user_exists(data_source) and (data_source or self.selected_data_source) not in self._created

    def can_change_attributes(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_change_attributes(
            self._principal(data_source), self.username, self._treated_as_existing(data_source)
        )

    def can_change_permissions(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_change_permissions(
            self._principal(data_source), self.username, self._treated_as_existing(data_source)
        )

    def can_change_system_permissions(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_change_system_permissions(self._principal(data_source))

    def can_edit_username(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_edit_username(self.username)

    def can_save_user(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_save_user(
            self._principal(data_source), self.username, self._treated_as_existing(data_source)
        )

    def can_delete_user(self, data_source: Optional[str] = None) -> bool:
        return dependencies.can_delete_user(
            self._principal(data_source), self.username, self.user_exists(data_source)
        )

    def is_read_only(self, data_source: Optional[str] = None) -> bool:
        return dependencies.is_read_only(
            self._principal(data_source), self.username, self._treated_as_existing(data_source)
        )

    def account_pages(self) -> List[AccountPage]:
        """One page per data source in which the account exists or could be created."""
        pages = []
        for data_source in self.data_sources:
            linked = self.user_exists(data_source)
            read_only = self.is_read_only(data_source)

            # Not relevant if it does not exist and cannot be created
            if not linked and read_only:
                continue

            if read_only:
                class_name = "read-only"
            elif linked:
                class_name = "linked"
            else:
                class_name = "unlinked"

            pages.append(AccountPage(
                data_source=data_source,
                name=f"DATA_SOURCE_{canonicalize(data_source)}.NAME",
                url=f"/manage/{quote(data_source, safe='')}/users/{quote(self.username or '', safe='')}",
                class_name=class_name,
            ))
        return pages

    # ------------------------------------------------------------------
    # Permission toggles
    # ------------------------------------------------------------------

    def set_system_permission(self, kind: SystemPermissionType, granted: bool) -> None:
        if not self.can_change_system_permissions():
            raise AuthorizationDenied("change system permissions", self.username)
        self._stage(PermissionCategory.SYSTEM, kind, None, granted)

    def set_user_permission(self, kind: ObjectPermissionType, identifier: str, granted: bool) -> None:
        if not self.can_change_permissions():
            raise AuthorizationDenied("change user permissions", self.username)
        self._stage(PermissionCategory.USER, kind, identifier, granted)

    def set_connection_permission(self, identifier: str, granted: bool) -> None:
        self._check_object_grant(PermissionCategory.CONNECTION, identifier)
        self._stage(PermissionCategory.CONNECTION, ObjectPermissionType.READ, identifier, granted)

    def set_connection_group_permission(self, identifier: str, granted: bool) -> None:
        self._check_object_grant(PermissionCategory.CONNECTION_GROUP, identifier)
        self._stage(PermissionCategory.CONNECTION_GROUP, ObjectPermissionType.READ, identifier, granted)

    def _check_object_grant(self, category: PermissionCategory, identifier: str) -> None:
        if not self.can_change_permissions():
            raise AuthorizationDenied(f"change {category.value} permissions", self.username)
        if not dependencies.can_grant_object_permission(self._principal(None), category, identifier):
            raise AuthorizationDenied(f"grant access to {category.value} {identifier!r}", self.username)

    def _stage(
        self,
        category: PermissionCategory,
        kind: PermissionKind,
        identifier: Optional[str],
        granted: bool,
    ) -> None:
        if self.permission_flags is None:
            raise ManageUserError("Permissions have not been loaded")

        # Only an actual change of the shown state is staged
        if self.permission_flags.get(category, kind, identifier) == granted:
            return
        self.permission_flags.set(category, kind, identifier, granted)
        self.staging.toggle(category, kind, identifier, granted)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        self.location = config.MANAGE_USERS_PATH

    async def save_user(self, password_match: Optional[str]) -> bool:
        """
        Create or update the account, then apply staged permission changes.

        Returns:
            True if both steps succeeded. On failure an error status is shown.
        """
        if self.user is None:
            raise ManageUserError("User has not been loaded")

        if password_match != self.user.password:
            self._show_error("MANAGE_USER.ERROR_PASSWORD_MISMATCH")
            return False

        if not self.can_save_user():
            raise AuthorizationDenied("save user", self.user.username)

        data_source = self.selected_data_source
        if self.user_exists(data_source):
            result = await self._users.save(data_source, self.user)
        else:
            result = await self._users.create(data_source, self.user)
            if not isinstance(result, Failure):
                self._created.add(data_source)
                self.username = self.user.username

        if isinstance(result, Failure):
            self._show_error(result.message)
            return False
        self.users[data_source] = self.user

        result = await self._permissions.apply_diff(
            data_source, self.user.username, self.staging.added, self.staging.removed
        )
        if isinstance(result, Failure):
            self._show_error(result.message)
            return False

        self.staging.reset()
        self.location = config.MANAGE_USERS_PATH
        return True

    def delete_user(self) -> None:
        """Ask the operator to confirm deletion."""

        async def confirmed():
            self.notifications.show_status(None)
            await self.delete_user_immediately()

        self.notifications.show_status(StatusMessage(
            title="MANAGE_USER.DIALOG_HEADER_CONFIRM_DELETE",
            text="MANAGE_USER.TEXT_CONFIRM_DELETE",
            actions=[
                StatusAction(ACTION_DELETE, confirmed, class_name="danger"),
                StatusAction(ACTION_CANCEL, self._close_status),
            ],
        ))

    async def delete_user_immediately(self) -> bool:
        if not self.can_delete_user():
            raise AuthorizationDenied("delete user", self.username)

        result = await self._users.delete(self.selected_data_source, self.user)
        if isinstance(result, Failure):
            self._show_error(result.message)
            return False

        self.location = config.MANAGE_USERS_PATH
        return True

    def describe(self) -> ManageUserView:
        return ManageUserView(
            username=self.username,
            data_source=self.selected_data_source,
            exists=self.user_exists(),
            can_change_attributes=self.can_change_attributes(),
            can_change_permissions=self.can_change_permissions(),
            can_change_system_permissions=self.can_change_system_permissions(),
            can_edit_username=self.can_edit_username(),
            can_save_user=self.can_save_user(),
            can_delete_user=self.can_delete_user(),
            read_only=self.is_read_only(),
            account_pages=self.account_pages(),
            system_permissions=[
                SystemPermissionOption(
                    label=label,
                    value=kind,
                    granted=bool(self.permission_flags and self.permission_flags.get(PermissionCategory.SYSTEM, kind)),
                )
                for label, kind in SYSTEM_PERMISSION_TYPES
            ],
            staged=self.staging.snapshot(),
        )

    def _close_status(self) -> None:
        self.notifications.show_status(None)

    def _show_error(self, text: str) -> None:
        self.notifications.show_status(StatusMessage(
            title="MANAGE_USER.DIALOG_HEADER_ERROR",
            text=text,
            class_name="error",
            actions=[StatusAction(ACTION_ACKNOWLEDGE, self._close_status)],
        ))
