"""Blob sink abstraction (local directory, S3 or Cloudinary)."""

from __future__ import annotations

from typing import Protocol


class BlobSink(Protocol):
    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:  # returns public url
        ...


__all__ = ["BlobSink"]
