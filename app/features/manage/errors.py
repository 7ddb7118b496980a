"""
Errors raised by the user editor.
"""


class ManageUserError(Exception):
    """Base class for user editor errors."""


class AuthorizationDenied(ManageUserError):
    """The operator attempted a change none of their permissions allow."""

    def __init__(self, action: str, username: str | None = None):
        self.action = action
        self.username = username
        target = f" for {username!r}" if username else ""
        super().__init__(f"Permission denied: {action}{target}")
