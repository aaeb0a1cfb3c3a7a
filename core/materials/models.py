from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class MaterialRecord:
    topic: str
    title: str = ""
    description: str = ""
    attachment_url: str | None = None
    attachment_name: str | None = None

    def with_attachment(self, url: str, name: str | None) -> "MaterialRecord":
        return replace(self, attachment_url=url, attachment_name=name)

    def to_document(self) -> dict[str, Any]:
        """Persisted shape, keyed by topic elsewhere so the topic is not repeated."""
        return {
            "title": self.title,
            "description": self.description,
            "attachmentUrl": self.attachment_url,
            "attachmentName": self.attachment_name,
        }

    @classmethod
    def from_document(cls, topic: str, data: dict[str, Any]) -> "MaterialRecord":
        # db.json files written by the first server revision use "pdfUrl"
        url = data.get("attachmentUrl", data.get("pdfUrl"))
        return cls(
            topic=topic,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            attachment_url=url,
            attachment_name=data.get("attachmentName"),
        )


__all__ = ["MaterialRecord"]
