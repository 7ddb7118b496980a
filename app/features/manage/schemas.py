"""
Pydantic schemas describing the user editor to a presentation layer.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel

from app.features.permissions.permission_set import SystemPermissionType
from app.features.permissions.schemas import StagedChangeSchema


class AccountPage(BaseModel):
    """A tab linking to the same account in one data source."""
    data_source: str
    name: str
    url: str
    class_name: Literal["read-only", "linked", "unlinked"]


class SystemPermissionOption(BaseModel):
    """A system permission checkbox and whether it is currently ticked."""
    label: str
    value: SystemPermissionType
    granted: bool


class ManageUserView(BaseModel):
    username: Optional[str]
    data_source: str
    exists: bool
    can_change_attributes: bool
    can_change_permissions: bool
    can_change_system_permissions: bool
    can_edit_username: bool
    can_save_user: bool
    can_delete_user: bool
    read_only: bool
    account_pages: List[AccountPage]
    system_permissions: List[SystemPermissionOption]
    staged: StagedChangeSchema
