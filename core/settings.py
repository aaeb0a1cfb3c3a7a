from __future__ import annotations

import base64
import binascii
import json
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from core.exceptions import ConfigurationError

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "default.yaml"

# Load .env file from project root
_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


_TRUTHY = {"true", "1", "yes", "on"}


def _is_truthy(value: str | None) -> bool:
    return bool(value) and value.strip().lower() in _TRUTHY


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    port_env: str = "PORT"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    file: Path | None = None


class SeedRecord(BaseModel):
    title: str = ""
    description: str = ""
    attachment_url: str | None = None
    attachment_name: str | None = None


class StoreSettings(BaseModel):
    backend: Literal["json", "sqlite", "firestore"] = "json"
    # json / sqlite file; defaults under data_root when unset
    path: Path | None = None
    # firestore
    collection: str = "studyMaterials"
    project_id: str | None = None
    credentials_env: str = "FIREBASE_SERVICE_ACCOUNT_BASE64"
    credentials_file: Path | None = None
    credentials: dict[str, Any] | None = None
    seed: dict[str, SeedRecord] = Field(default_factory=dict)


class BlobSinkSettings(BaseModel):
    backend: Literal["local", "s3", "cloudinary"] = "local"
    # local
    root: Path | None = None
    public_path: str = "/uploads"
    # s3
    bucket: str | None = None
    region: str | None = None
    prefix: str = ""
    public_base_url: str | None = None
    # cloudinary
    folder: str = "study-materials"
    cloudinary_url_env: str = "CLOUDINARY_URL"
    cloudinary_url: str | None = None
    cloud_name: str | None = None
    api_key: str | None = None
    api_secret: str | None = None

    @field_validator("public_path")
    def _normalize_public_path(cls, value: str) -> str:  # noqa: D401
        cleaned = "/" + value.strip().strip("/")
        return cleaned if cleaned != "/" else "/uploads"


class Settings(BaseModel):
    app_name: str = "Gyankunj Backend"
    app_version: str = "0.1.0"
    data_root: Path = Path("data")
    # Render mounts its persistent disk here and sets RENDER=true
    persistent_root: Path = Path("/data")
    persistent_env: str = "RENDER"
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    blob_sink: BlobSinkSettings = Field(default_factory=BlobSinkSettings)

    @classmethod
    def load(cls, path: Path | None = None, environ: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from a YAML file and resolve them against the environment.

        Args:
            path: Optional path to configuration file. If not provided, uses
                GYANKUNJ_CONFIG environment variable or defaults to the bundled
                config/default.yaml.
            environ: Environment mapping to resolve against; defaults to os.environ.

        Returns:
            Resolved Settings instance.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ValueError: If configuration is invalid.
        """
        env = os.environ if environ is None else environ
        config_path = path or Path(env.get("GYANKUNJ_CONFIG") or DEFAULT_CONFIG_PATH)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            settings = cls(**payload)
        except Exception as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc
        return settings.resolve(env)

    def resolve(self, environ: Mapping[str, str]) -> "Settings":
        """Return a copy with environment overrides and derived paths filled in.

        This is the only place that reads the process environment; every
        component receives the resolved object.
        """
        data_root = self.persistent_root if _is_truthy(environ.get(self.persistent_env)) else self.data_root

        server = self.server.model_copy()
        raw_port = environ.get(server.port_env)
        if raw_port:
            try:
                server.port = int(raw_port)
            except ValueError as exc:
                raise ConfigurationError(
                    f"Environment variable '{server.port_env}' must be an integer",
                    {"value": raw_port},
                ) from exc

        logging_settings = self.logging.model_copy()
        if environ.get("LOG_LEVEL"):
            logging_settings.level = environ["LOG_LEVEL"]
        if environ.get("JSON_LOGGING"):
            logging_settings.json_format = _is_truthy(environ["JSON_LOGGING"])
        if environ.get("LOG_FILE"):
            logging_settings.file = Path(environ["LOG_FILE"])

        store = self.store.model_copy()
        if store.path is None and store.backend == "json":
            store.path = data_root / "db.json"
        elif store.path is None and store.backend == "sqlite":
            store.path = data_root / "materials.sqlite3"
        if store.backend == "firestore" and store.credentials is None:
            store.credentials = _load_service_account(store, environ)

        sink = self.blob_sink.model_copy()
        if sink.root is None:
            sink.root = data_root / "uploads"
        if sink.backend == "cloudinary":
            sink.cloudinary_url = sink.cloudinary_url or environ.get(sink.cloudinary_url_env)
            sink.cloud_name = sink.cloud_name or environ.get("CLOUDINARY_CLOUD_NAME")
            sink.api_key = sink.api_key or environ.get("CLOUDINARY_API_KEY")
            sink.api_secret = sink.api_secret or environ.get("CLOUDINARY_API_SECRET")
        elif sink.backend == "s3" and not sink.bucket:
            raise ConfigurationError("blob_sink.bucket is required for the s3 backend")

        return self.model_copy(
            update={
                "data_root": data_root,
                "server": server,
                "logging": logging_settings,
                "store": store,
                "blob_sink": sink,
            }
        )


def _load_service_account(store: StoreSettings, environ: Mapping[str, str]) -> dict[str, Any] | None:
    encoded = environ.get(store.credentials_env)
    if encoded:
        try:
            return json.loads(base64.b64decode(encoded).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"Environment variable '{store.credentials_env}' is not a base64-encoded service account",
            ) from exc
    if store.credentials_file is not None:
        if not store.credentials_file.exists():
            raise ConfigurationError(
                "Service account file not found",
                {"path": str(store.credentials_file)},
            )
        return json.loads(store.credentials_file.read_text(encoding="utf-8"))
    # fall back to application default credentials
    return None


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "ServerSettings",
    "LoggingSettings",
    "SeedRecord",
    "StoreSettings",
    "BlobSinkSettings",
    "get_settings",
]
