from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import SinkUnavailableError


class S3Storage:
    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client = session.client("s3")
        self.client = client

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _url(self, s3_key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{s3_key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{s3_key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{s3_key}"

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        s3_key = self._key(key)
        try:
            self.client.put_object(Bucket=self.bucket, Key=s3_key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            raise SinkUnavailableError("S3 upload failed", {"bucket": self.bucket, "key": s3_key, "error": str(exc)}) from exc
        return self._url(s3_key)


__all__ = ["S3Storage"]
