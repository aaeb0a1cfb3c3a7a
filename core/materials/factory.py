from __future__ import annotations

from core.exceptions import ConfigurationError
from core.materials import MaterialStore
from core.materials.models import MaterialRecord
from core.settings import StoreSettings


def seed_records(settings: StoreSettings) -> dict[str, MaterialRecord]:
    return {
        topic: MaterialRecord(
            topic=topic,
            title=seed.title,
            description=seed.description,
            attachment_url=seed.attachment_url,
            attachment_name=seed.attachment_name,
        )
        for topic, seed in settings.seed.items()
    }


def build_material_store(settings: StoreSettings) -> MaterialStore:
    if settings.backend == "json":
        from core.materials.json_store import JsonFileMaterialStore

        if settings.path is None:
            raise ConfigurationError("store.path is required for the json backend")
        return JsonFileMaterialStore(settings.path)
    if settings.backend == "sqlite":
        from core.materials.sqlite_store import SqliteMaterialStore

        if settings.path is None:
            raise ConfigurationError("store.path is required for the sqlite backend")
        return SqliteMaterialStore(settings.path)
    if settings.backend == "firestore":
        from core.materials.firestore_store import FirestoreMaterialStore, create_firestore_client

        return FirestoreMaterialStore(create_firestore_client(settings), settings.collection)
    raise ConfigurationError(f"Unknown store backend: {settings.backend}")


__all__ = ["build_material_store", "seed_records"]
