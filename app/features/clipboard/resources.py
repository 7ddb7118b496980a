"""
Temporary handles for displaying binary clipboard contents.

Each handle keeps its image alive until revoked.
"""
import uuid
from typing import Dict, Optional

from app.features.clipboard.payload import ImagePayload
from app.utils import get_logger


log = get_logger(__name__)


class ObjectURLRegistry:

    def __init__(self):
        self._objects: Dict[str, ImagePayload] = {}

    def create_object_url(self, payload: ImagePayload) -> str:
        url = f"blob:{uuid.uuid4()}"
        self._objects[url] = payload
        log.debug("Created %s for %s (%d bytes)", url, payload.media_type, len(payload.data))
        return url

    def revoke_object_url(self, url: str) -> None:
        if self._objects.pop(url, None) is not None:
            log.debug("Revoked %s", url)

    def resolve(self, url: str) -> Optional[ImagePayload]:
        return self._objects.get(url)

    @property
    def live_count(self) -> int:
        return len(self._objects)
