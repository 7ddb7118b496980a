"""
Clipboard bridge between a local editable buffer, the host clipboard and a
remote session.

The bridge owns the current clipboard payload. It is updated when the host
clipboard may have changed (copy, cut, window focus), when an image is
pasted, or when data arrives from the remote session and is assigned by the
caller. Data arriving while remote keys are held is associated with those
keys and written to the host clipboard once each key is released, so that a
remote copy shortcut ends up on the local clipboard without intermediate
writes mid-keystroke.

Every accepted change is announced on the broadcast channel as
("clipboard", media_type, payload).

All handlers run on the event loop thread. Reads of the host clipboard run
as tasks; whichever read completes last wins.
"""
import asyncio
import re
from typing import Coroutine, Dict, List, Optional, Set, Tuple

from app.core import config
from app.features.clipboard.events import EventChannel, HostWindow, KeyEventSource
from app.features.clipboard.host import ClipboardUnavailable, HostClipboard
from app.features.clipboard.payload import (
    WINDOW,
    ClipboardPayload,
    HostEvent,
    ImagePayload,
    PasteEvent,
    TextPayload,
)
from app.features.clipboard.resources import ObjectURLRegistry
from app.utils import get_logger


log = get_logger(__name__)

CLIPBOARD_EVENT = "clipboard"

# Host events after which the host clipboard may hold new data
CHECK_EVENTS = ("copy", "cut", "focus")


class ClipboardBridge:
    """
    Usage:
        bridge = ClipboardBridge(create_host_clipboard(), window, keys)
        await bridge.mount()
        ...
        bridge.payload = TextPayload("from remote")
        ...
        bridge.close()
    """

    def __init__(
        self,
        clipboard: HostClipboard,
        window: HostWindow,
        keys: KeyEventSource,
        broadcast: Optional[EventChannel] = None,
        resources: Optional[ObjectURLRegistry] = None,
        image_pattern: str = config.CLIPBOARD_IMAGE_PATTERN,
    ):
        self._clipboard = clipboard
        self.broadcast = broadcast or EventChannel()
        self._resources = resources or ObjectURLRegistry()
        self._image_pattern = re.compile(image_pattern)

        self._payload: ClipboardPayload = TextPayload()

        # Display handle of the current image, None while holding text
        self.image_url: Optional[str] = None

        # keysyms of remote keys currently held
        self.pressed_keys: Set[int] = set()

        # Latest payload received while each held key was pressed
        self.pending_by_key: Dict[int, ClipboardPayload] = {}

        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

        self._subscriptions: List[Tuple[EventChannel, str]] = [
            (window, window.subscribe(event_type, self._host_event)) for event_type in CHECK_EVENTS
        ]
        self._subscriptions.append((keys, keys.subscribe(KeyEventSource.KEYDOWN, self._key_pressed)))
        self._subscriptions.append((keys, keys.subscribe(KeyEventSource.KEYUP, self._key_released)))

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    @property
    def payload(self) -> ClipboardPayload:
        return self._payload

    @payload.setter
    def payload(self, payload: ClipboardPayload) -> None:
        if self._closed:
            raise RuntimeError("Clipboard bridge is closed")
        if payload == self._payload:
            return
        self._payload = payload

        # Associate new data with any currently-pressed key
        for keysym in self.pressed_keys:
            self.pending_by_key[keysym] = payload

        self._release_image()

        if isinstance(payload, ImagePayload):
            self.image_url = self._resources.create_object_url(payload)
            self.broadcast.publish(CLIPBOARD_EVENT, payload.media_type, payload)
        else:
            self.broadcast.publish(CLIPBOARD_EVENT, "text/plain", payload)

    def is_image(self) -> bool:
        return self.image_url is not None

    def is_text(self) -> bool:
        return not self.is_image()

    def reset_clipboard(self) -> None:
        """Clear the clipboard, returning to text if it held an image."""
        self.payload = TextPayload()

    def _release_image(self) -> None:
        if self.image_url is not None:
            self._resources.revoke_object_url(self.image_url)
            self.image_url = None

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def handle_paste(self, event: PasteEvent) -> bool:
        """
        Take the first pasted image, if any, instead of letting the host paste.

        Returns:
            True if the paste was intercepted
        """
        for item in event.items:
            if item.kind == "file" and self._image_pattern.search(item.type):
                self.payload = item.get_as_file()
                event.prevent_default()
                return True
        return False

    async def check_clipboard(self, event: Optional[HostEvent] = None) -> None:
        """
        Read the host clipboard and adopt its contents.

        Focus events only count when fired on the window itself, not on an
        element within it.
        """
        if event is not None and event.type == "focus" and event.target != WINDOW:
            return

        try:
            payload = await self._clipboard.read()
        except ClipboardUnavailable as e:
            log.debug("Host clipboard unavailable, keeping current data: %s", e)
            return

        if self._closed:
            log.debug("Dropping host clipboard data read after close")
            return
        self.payload = payload

    def _host_event(self, event: HostEvent) -> None:
        self._spawn(self.check_clipboard(event))

    # ------------------------------------------------------------------
    # Remote keys
    # ------------------------------------------------------------------

    def _key_pressed(self, keysym: int) -> None:
        self.pressed_keys.add(keysym)

    def _key_released(self, keysym: int) -> None:
        # Sync host clipboard with data received while this key was held
        payload = self.pending_by_key.pop(keysym, None)
        if payload is not None:
            self._spawn(self._write(payload))
        self.pressed_keys.discard(keysym)

    async def _write(self, payload: ClipboardPayload) -> None:
        try:
            await self._clipboard.write(payload)
        except ClipboardUnavailable as e:
            log.warning("Unable to update host clipboard: %s", e)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def mount(self) -> None:
        """Perform the initial host clipboard check."""
        await self.check_clipboard()

    def _spawn(self, coro: Coroutine) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for in-flight host clipboard reads and writes to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        """Detach from all event sources and release the image handle."""
        if self._closed:
            return
        self._closed = True

        for channel, subscription_id in self._subscriptions:
            channel.unsubscribe(subscription_id)
        self._subscriptions.clear()

        self._release_image()
        self.pending_by_key.clear()
        self.pressed_keys.clear()

    def __enter__(self) -> "ClipboardBridge":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
