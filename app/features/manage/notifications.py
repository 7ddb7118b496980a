"""
Status dialogs shown to the operator.

At most one status is shown at a time. A status offers actions; triggering
an action runs its callback, which usually closes the dialog.
"""
import inspect
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Union

from app.utils import get_logger


log = get_logger(__name__)

ActionCallback = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class StatusAction:
    name: str
    callback: ActionCallback
    class_name: Optional[str] = None


@dataclass
class StatusMessage:
    title: str
    text: str
    class_name: Optional[str] = None
    actions: List[StatusAction] = field(default_factory=list)


class NotificationCenter:

    def __init__(self):
        self.status: Optional[StatusMessage] = None

    def show_status(self, status: Optional[StatusMessage]) -> None:
        """Show the given status, replacing any current one. None closes the dialog."""
        if status is not None:
            log.debug("Showing status %s: %s", status.title, status.text)
        self.status = status

    async def trigger(self, action_name: str) -> None:
        """Run the named action of the current status."""
        if self.status is None:
            raise LookupError("No status is being shown")

        for action in self.status.actions:
            if action.name == action_name:
                outcome = action.callback()
                if inspect.isawaitable(outcome):
                    await outcome
                return

        raise LookupError(f"Current status has no action {action_name!r}")
