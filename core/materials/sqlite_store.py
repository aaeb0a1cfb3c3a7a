from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import Column, String, Text, create_engine, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.exceptions import StoreUnavailableError, TopicNotFoundError
from core.materials.models import MaterialRecord


Base = declarative_base()


class MaterialRow(Base):
    __tablename__ = "materials"

    topic = Column(String, primary_key=True)
    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    attachment_url = Column(Text)
    attachment_name = Column(Text)

    def to_record(self) -> MaterialRecord:
        return MaterialRecord(
            topic=self.topic,
            title=self.title or "",
            description=self.description or "",
            attachment_url=self.attachment_url,
            attachment_name=self.attachment_name,
        )


class SqliteMaterialStore:
    """Embedded store; one row per topic, every mutation committed before returning."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Could not open SQLite store", {"path": str(path), "error": str(exc)}) from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreUnavailableError("SQLite operation failed", {"path": str(self.path), "error": str(exc)}) from exc
        finally:
            db.close()

    def get(self, topic: str) -> MaterialRecord:
        with self._session() as db:
            row = db.get(MaterialRow, topic)
            if row is None:
                raise TopicNotFoundError(topic)
            return row.to_record()

    def attach(self, topic: str, attachment_url: str, attachment_name: str | None) -> MaterialRecord:
        with self._session() as db:
            # single UPDATE so title/description are never read and rewritten
            result = db.execute(
                update(MaterialRow)
                .where(MaterialRow.topic == topic)
                .values(attachment_url=attachment_url, attachment_name=attachment_name)
            )
            if result.rowcount == 0:
                db.rollback()
                raise TopicNotFoundError(topic)
            row = db.get(MaterialRow, topic)
            record = row.to_record()
            db.commit()
            return record

    def seed_defaults(self, records: Mapping[str, MaterialRecord]) -> bool:
        with self._session() as db:
            if db.query(MaterialRow).first() is not None:
                return False
            db.add_all(
                MaterialRow(
                    topic=topic,
                    title=record.title,
                    description=record.description,
                    attachment_url=record.attachment_url,
                    attachment_name=record.attachment_name,
                )
                for topic, record in records.items()
            )
            try:
                db.commit()
            except IntegrityError:
                # another process seeded first
                db.rollback()
                return False
        logger.info("Seeded {count} default topics into {path}", count=len(records), path=self.path)
        return True


__all__ = ["MaterialRow", "SqliteMaterialStore"]
