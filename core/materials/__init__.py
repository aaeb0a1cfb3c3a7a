"""Topic-keyed material store abstraction (JSON file, SQLite or Firestore)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from core.materials.models import MaterialRecord


class MaterialStore(Protocol):
    def get(self, topic: str) -> MaterialRecord:  # raises TopicNotFoundError
        ...

    def attach(self, topic: str, attachment_url: str, attachment_name: str | None) -> MaterialRecord:
        ...

    def seed_defaults(self, records: Mapping[str, MaterialRecord]) -> bool:  # True when seeded
        ...


__all__ = ["MaterialRecord", "MaterialStore"]
