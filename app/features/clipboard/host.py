"""
Access to the host clipboard.

Reads and writes are asynchronous. A read that cannot be satisfied raises
ClipboardUnavailable, which callers treat as "no data available".
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import pyperclip

from app.core import config
from app.features.clipboard.payload import ClipboardPayload, ImagePayload, TextPayload
from app.utils import get_logger


log = get_logger(__name__)


class ClipboardUnavailable(Exception):
    """The host clipboard cannot be read or written right now."""


class HostClipboard(ABC):
    """Contract for host clipboard access."""

    @abstractmethod
    async def read(self) -> ClipboardPayload:
        """
        Get the current host clipboard contents.

        Raises:
            ClipboardUnavailable: If the clipboard cannot be read
        """
        ...

    @abstractmethod
    async def write(self, payload: ClipboardPayload) -> None:
        """
        Replace the host clipboard contents.

        Raises:
            ClipboardUnavailable: If the clipboard cannot hold the payload
        """
        ...


class MemoryClipboard(HostClipboard):
    """A process-local clipboard, for headless hosts."""

    def __init__(self, payload: Optional[ClipboardPayload] = None):
        self.payload: ClipboardPayload = payload if payload is not None else TextPayload()

    async def read(self) -> ClipboardPayload:
        return self.payload

    async def write(self, payload: ClipboardPayload) -> None:
        self.payload = payload


class PyperclipClipboard(HostClipboard):
    """
    The system clipboard, via pyperclip.

    pyperclip only handles text, so images can never be written.
    pyperclip calls block, and run on a worker thread.
    """

    async def read(self) -> ClipboardPayload:
        try:
            text = await asyncio.to_thread(pyperclip.paste)
        except (pyperclip.PyperclipException, UnicodeError, OSError) as e:
            # Subprocess backends fail on undecodable contents or a missing binary
            raise ClipboardUnavailable(str(e)) from e
        return TextPayload(text or "")

    async def write(self, payload: ClipboardPayload) -> None:
        if isinstance(payload, ImagePayload):
            raise ClipboardUnavailable(f"Cannot place {payload.media_type} data on the system clipboard")
        try:
            await asyncio.to_thread(pyperclip.copy, payload.text)
        except (pyperclip.PyperclipException, UnicodeError, OSError) as e:
            raise ClipboardUnavailable(str(e)) from e


def create_host_clipboard(backend: Optional[str] = None) -> HostClipboard:
    """Build the host clipboard accessor named by CLIPBOARD_BACKEND."""
    backend = backend or config.CLIPBOARD_BACKEND
    if backend == "pyperclip":
        return PyperclipClipboard()
    if backend == "memory":
        return MemoryClipboard()
    raise ValueError(f"Unknown clipboard backend: {backend!r}")
