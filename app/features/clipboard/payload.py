"""
Clipboard contents and the host events that carry them.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class TextPayload:
    text: str = ""

    @property
    def media_type(self) -> str:
        return "text/plain"


@dataclass(frozen=True)
class ImagePayload:
    data: bytes = field(repr=False)
    media_type: str = "image/png"


ClipboardPayload = Union[TextPayload, ImagePayload]


@dataclass
class PasteItem:
    """
    One entry of a paste. kind is "file" for binary data or "string" for text.

    Examples:
        PasteItem("file", "image/png", b"\\x89PNG...")
        PasteItem("string", "text/plain", "hello")
    """
    kind: str
    type: str
    data: Union[str, bytes]

    def get_as_file(self) -> Optional[ImagePayload]:
        if self.kind != "file":
            return None
        return ImagePayload(bytes(self.data), self.type)


@dataclass
class PasteEvent:
    items: List[PasteItem] = field(default_factory=list)
    default_prevented: bool = False

    def prevent_default(self) -> None:
        """Stop the host from inserting the pasted data itself."""
        self.default_prevented = True


# Target of host events fired on the top-level window rather than an element
WINDOW = "window"


@dataclass(frozen=True)
class HostEvent:
    """A copy, cut or focus notification from the host environment."""
    type: str
    target: str = WINDOW
