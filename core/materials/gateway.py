"""Upload orchestration: validate, store the blob, attach its URL to the topic."""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from core.exceptions import (
    MissingFileError,
    MissingTopicError,
    TopicNotFoundError,
    UnknownTopicError,
    UnsupportedMediaTypeError,
)
from core.materials import MaterialStore
from core.materials.models import MaterialRecord
from core.storage import BlobSink


PDF_MEDIA_TYPE = "application/pdf"

_UNSAFE_KEY_CHARS = re.compile(r"[^\w.-]")


@dataclass(frozen=True)
class UploadResult:
    url: str
    object_name: str
    record: MaterialRecord


def safe_key(topic: str) -> str:
    """Topic reduced to characters that are safe in any object key."""
    cleaned = _UNSAFE_KEY_CHARS.sub("_", topic.strip()).strip(".")
    return cleaned or "topic"


class UploadGateway:
    def __init__(
        self,
        store: MaterialStore,
        sink: BlobSink,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.sink = sink
        self._clock = clock
        self._stamp_lock = threading.Lock()
        self._last_stamp = 0

    def _next_stamp(self) -> int:
        """Millisecond timestamp, strictly increasing within this process."""
        with self._stamp_lock:
            stamp = max(int(self._clock() * 1000), self._last_stamp + 1)
            self._last_stamp = stamp
            return stamp

    def object_name(self, topic: str) -> str:
        return f"{safe_key(topic)}-{self._next_stamp()}.pdf"

    def upload(
        self,
        topic: str | None,
        filename: str | None,
        content_type: str | None,
        data: bytes | None,
    ) -> UploadResult:
        """Store ``data`` in the blob sink and attach the resulting URL to ``topic``.

        Raises:
            MissingTopicError: no topic given.
            UnsupportedMediaTypeError: declared type is not application/pdf.
            MissingFileError: no file content.
            SinkUnavailableError: the blob sink failed; nothing was attached.
            UnknownTopicError: the topic has no record. The blob has already
                been stored at this point and is left in place.
            StoreUnavailableError: the store failed after the blob was stored.
        """
        if not topic or not topic.strip():
            raise MissingTopicError()
        if content_type != PDF_MEDIA_TYPE:
            raise UnsupportedMediaTypeError(content_type)
        if not data:
            raise MissingFileError()

        name = self.object_name(topic)
        url = self.sink.put_bytes(name, data, content_type)

        try:
            record = self.store.attach(topic, url, filename)
        except TopicNotFoundError as exc:
            logger.warning("Upload for unknown topic {topic}; blob {name} left orphaned", topic=topic, name=name)
            raise UnknownTopicError(topic, name) from exc

        logger.info("Updated {topic} with PDF: {name}", topic=topic, name=name)
        return UploadResult(url=url, object_name=name, record=record)


__all__ = ["PDF_MEDIA_TYPE", "UploadGateway", "UploadResult", "safe_key"]
