from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from loguru import logger

from core.exceptions import StoreUnavailableError, TopicNotFoundError
from core.materials.models import MaterialRecord
from core.settings import StoreSettings


FIREBASE_APP_NAME = "gyankunj"


def create_firestore_client(settings: StoreSettings) -> Any:
    """Initialise (once per process) the Firebase app and return its Firestore client."""
    try:
        app = firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        if settings.credentials:
            cred = credentials.Certificate(settings.credentials)
        else:
            cred = credentials.ApplicationDefault()
        options = {"projectId": settings.project_id} if settings.project_id else None
        app = firebase_admin.initialize_app(cred, options=options, name=FIREBASE_APP_NAME)
    return firestore.client(app)


class FirestoreMaterialStore:
    """One document per topic in a Firestore collection.

    Attach uses a field-level ``update`` which Firestore applies atomically
    and rejects for missing documents, so no client-side locking is needed.
    """

    def __init__(self, client: Any, collection: str) -> None:
        self.client = client
        self.collection_name = collection

    @property
    def _collection(self) -> Any:
        return self.client.collection(self.collection_name)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except google_exceptions.GoogleAPIError as exc:
            raise StoreUnavailableError(
                f"Firestore {operation} failed",
                {"collection": self.collection_name, "error": str(exc)},
            ) from exc

    def get(self, topic: str) -> MaterialRecord:
        with self._guard("read"):
            try:
                snapshot = self._collection.document(topic).get()
            except ValueError as exc:
                # not a valid document id (e.g. contains "/")
                raise TopicNotFoundError(topic) from exc
        if not snapshot.exists:
            raise TopicNotFoundError(topic)
        return MaterialRecord.from_document(topic, snapshot.to_dict() or {})

    def attach(self, topic: str, attachment_url: str, attachment_name: str | None) -> MaterialRecord:
        with self._guard("update"):
            try:
                document = self._collection.document(topic)
                document.update({"attachmentUrl": attachment_url, "attachmentName": attachment_name})
            except (google_exceptions.NotFound, ValueError) as exc:
                raise TopicNotFoundError(topic) from exc
            snapshot = document.get()
        return MaterialRecord.from_document(topic, snapshot.to_dict() or {})

    def seed_defaults(self, records: Mapping[str, MaterialRecord]) -> bool:
        with self._guard("seed"):
            existing = next(iter(self._collection.limit(1).stream()), None)
            if existing is not None:
                return False
            batch = self.client.batch()
            for topic, record in records.items():
                batch.create(self._collection.document(topic), record.to_document())
            try:
                batch.commit()
            except (google_exceptions.AlreadyExists, google_exceptions.Conflict):
                # another instance seeded first
                return False
        logger.info("Seeded {count} default topics into Firestore collection {name}", count=len(records), name=self.collection_name)
        return True


__all__ = ["FirestoreMaterialStore", "create_firestore_client"]
