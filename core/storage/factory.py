from __future__ import annotations

from core.exceptions import ConfigurationError
from core.settings import BlobSinkSettings
from core.storage import BlobSink


def build_blob_sink(settings: BlobSinkSettings) -> BlobSink:
    if settings.backend == "local":
        from core.storage.local import LocalStorage

        if settings.root is None:
            raise ConfigurationError("blob_sink.root is required for the local backend")
        return LocalStorage(settings.root, settings.public_path)
    if settings.backend == "s3":
        from core.storage.s3 import S3Storage

        if not settings.bucket:
            raise ConfigurationError("blob_sink.bucket is required for the s3 backend")
        return S3Storage(
            settings.bucket,
            prefix=settings.prefix,
            region=settings.region,
            public_base_url=settings.public_base_url,
        )
    if settings.backend == "cloudinary":
        from core.storage.cloudinary_store import CloudinaryStorage, parse_cloudinary_url

        if settings.cloudinary_url:
            creds = parse_cloudinary_url(settings.cloudinary_url)
        elif settings.cloud_name and settings.api_key and settings.api_secret:
            creds = {"cloud_name": settings.cloud_name, "api_key": settings.api_key, "api_secret": settings.api_secret}
        else:
            raise ConfigurationError("Cloudinary credentials are not configured")
        return CloudinaryStorage(folder=settings.folder, **creds)
    raise ConfigurationError(f"Unknown blob sink backend: {settings.backend}")


__all__ = ["build_blob_sink"]
