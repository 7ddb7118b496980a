"""
Observer registries for host window events, remote key events and
clipboard change broadcasts.
"""
import uuid
from typing import Any, Callable, Dict, Optional

from app.utils import get_logger


log = get_logger(__name__)

EventHandler = Callable[..., Any]


class EventChannel:
    """
    Deliver published events to the handlers subscribed to their type.

    Usage:
        channel = EventChannel()
        subscription_id = channel.subscribe("copy", on_copy)
        channel.publish("copy", event)
        channel.unsubscribe(subscription_id)
    """

    def __init__(self):
        # event type -> subscription id -> handler
        self._handlers: Dict[str, Dict[str, EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> str:
        """
        Returns:
            Subscription ID to pass to unsubscribe()
        """
        subscription_id = str(uuid.uuid4())
        self._handlers.setdefault(event_type, {})[subscription_id] = handler
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Returns:
            True if unsubscribed, False if not found
        """
        for event_type, handlers in self._handlers.items():
            if handlers.pop(subscription_id, None) is not None:
                if not handlers:
                    del self._handlers[event_type]
                return True
        return False

    def publish(self, event_type: str, *args: Any) -> int:
        """
        Call every handler subscribed to event_type, in subscription order.

        Returns:
            Number of handlers called
        """
        handlers = list(self._handlers.get(event_type, {}).values())
        for handler in handlers:
            handler(*args)
        return len(handlers)

    def subscriber_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, {}))
        return sum(len(handlers) for handlers in self._handlers.values())


class KeyEventSource(EventChannel):
    """Key presses and releases reported by the remote session, by keysym."""

    KEYDOWN = "keydown"
    KEYUP = "keyup"

    def press(self, keysym: int) -> None:
        log.debug("Key 0x%X pressed", keysym)
        self.publish(self.KEYDOWN, keysym)

    def release(self, keysym: int) -> None:
        log.debug("Key 0x%X released", keysym)
        self.publish(self.KEYUP, keysym)


class HostWindow(EventChannel):
    """Copy, cut and focus notifications of the host environment."""

    def dispatch_event(self, event) -> int:
        return self.publish(event.type, event)
