from __future__ import annotations

from pathlib import Path

from core.exceptions import SinkUnavailableError


class LocalStorage:
    """Writes blobs under ``root``; the API serves that directory at ``public_path``."""

    def __init__(self, root: Path, public_path: str = "/uploads") -> None:
        self.root = root
        self.public_path = public_path.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise SinkUnavailableError("Key escapes storage root", {"key": key, "root": str(self.root)})
        return path

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise SinkUnavailableError("Could not write upload to disk", {"path": str(path), "error": str(exc)}) from exc
        return f"{self.public_path}/{key}"


__all__ = ["LocalStorage"]
