from __future__ import annotations

from core.exceptions import SinkUnavailableError


SAMPLE_PDF = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


class RecordingSink:
    """Blob sink double that remembers every call."""

    def __init__(self, base_url: str = "https://blobs.example.test", fail: bool = False) -> None:
        self.base_url = base_url
        self.fail = fail
        self.calls: list[tuple[str, bytes, str]] = []

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        self.calls.append((key, data, content_type))
        if self.fail:
            raise SinkUnavailableError("sink offline", {"key": key})
        return f"{self.base_url}/{key}"
