from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

from core.exceptions import StoreUnavailableError, TopicNotFoundError
from core.materials.models import MaterialRecord


class JsonFileMaterialStore:
    """All records in one JSON document keyed by topic, cached in memory.

    Every mutation rewrites the document (temp file + rename) before the
    in-memory copy changes, so a failed write leaves both untouched.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._records = self._load()

    def _load(self) -> dict[str, MaterialRecord]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailableError(
                "Error reading database file",
                {"path": str(self.path), "error": str(exc)},
            ) from exc
        if not isinstance(data, dict):
            raise StoreUnavailableError("Database file must contain a JSON object", {"path": str(self.path)})
        records: dict[str, MaterialRecord] = {}
        for topic, value in data.items():
            if value is None:
                value = {}
            if not isinstance(value, dict):
                raise StoreUnavailableError(
                    "Database file entries must be JSON objects",
                    {"path": str(self.path), "topic": topic},
                )
            records[topic] = MaterialRecord.from_document(topic, value)
        return records

    def _save(self, records: Mapping[str, MaterialRecord]) -> None:
        payload = {topic: record.to_document() for topic, record in records.items()}
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fp:
                    json.dump(payload, fp, indent=2, ensure_ascii=False)
                    fp.flush()
                    os.fsync(fp.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreUnavailableError(
                "Error saving database file",
                {"path": str(self.path), "error": str(exc)},
            ) from exc

    def get(self, topic: str) -> MaterialRecord:
        record = self._records.get(topic)
        if record is None:
            raise TopicNotFoundError(topic)
        return record

    def attach(self, topic: str, attachment_url: str, attachment_name: str | None) -> MaterialRecord:
        with self._lock:
            current = self._records.get(topic)
            if current is None:
                raise TopicNotFoundError(topic)
            updated = current.with_attachment(attachment_url, attachment_name)
            records = dict(self._records)
            records[topic] = updated
            self._save(records)
            self._records = records
        return updated

    def seed_defaults(self, records: Mapping[str, MaterialRecord]) -> bool:
        with self._lock:
            if self._records:
                return False
            seeded = dict(records)
            self._save(seeded)
            self._records = seeded
        logger.info("No records in {path}. Created defaults for {count} topics", path=self.path, count=len(seeded))
        return True


__all__ = ["JsonFileMaterialStore"]
