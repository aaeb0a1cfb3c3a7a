from __future__ import annotations

import threading

import pytest

pytest.importorskip("loguru")

from core.exceptions import (
    MissingFileError,
    MissingTopicError,
    SinkUnavailableError,
    TopicNotFoundError,
    UnknownTopicError,
    UnsupportedMediaTypeError,
)
from core.materials.gateway import UploadGateway, safe_key
from core.materials.json_store import JsonFileMaterialStore
from core.materials.models import MaterialRecord
from tests.fakes import RecordingSink


@pytest.fixture()
def store(tmp_path):
    store = JsonFileMaterialStore(tmp_path / "db.json")
    store.seed_defaults(
        {"ancient-history": MaterialRecord("ancient-history", "Ancient History", "Default notes.")}
    )
    return store


@pytest.fixture()
def gateway(store, sink):
    return UploadGateway(store, sink, clock=lambda: 1700000000.5)


def test_upload_stores_blob_then_attaches_url(gateway, store, sink, sample_pdf):
    result = gateway.upload("ancient-history", "notes.pdf", "application/pdf", sample_pdf)

    assert result.object_name == "ancient-history-1700000000500.pdf"
    assert result.url == "https://blobs.example.test/ancient-history-1700000000500.pdf"
    assert sink.calls == [(result.object_name, sample_pdf, "application/pdf")]
    record = store.get("ancient-history")
    assert record.attachment_url == result.url
    assert record.attachment_name == "notes.pdf"
    assert record.title == "Ancient History"


def test_non_pdf_rejected_before_sink(gateway, store, sink):
    with pytest.raises(UnsupportedMediaTypeError):
        gateway.upload("ancient-history", "notes.txt", "text/plain", b"hello")

    assert sink.calls == []
    assert store.get("ancient-history").attachment_url is None


@pytest.mark.parametrize("content_type", [None, "", "application/PDF", "application/pdf; charset=binary", "application/x-pdf"])
def test_content_type_must_match_exactly(gateway, sink, sample_pdf, content_type):
    with pytest.raises(UnsupportedMediaTypeError):
        gateway.upload("ancient-history", "notes.pdf", content_type, sample_pdf)
    assert sink.calls == []


def test_bytes_are_not_sniffed(gateway, sink):
    result = gateway.upload("ancient-history", "fake.pdf", "application/pdf", b"not really a pdf")
    assert result.url.endswith(".pdf")
    assert len(sink.calls) == 1


@pytest.mark.parametrize("data", [None, b""])
def test_empty_upload_is_missing_file(gateway, sink, data):
    with pytest.raises(MissingFileError):
        gateway.upload("ancient-history", "notes.pdf", "application/pdf", data)
    assert sink.calls == []


@pytest.mark.parametrize("topic", [None, "", "   "])
def test_missing_topic(gateway, sink, sample_pdf, topic):
    with pytest.raises(MissingTopicError):
        gateway.upload(topic, "notes.pdf", "application/pdf", sample_pdf)
    assert sink.calls == []


def test_unknown_topic_leaves_orphaned_blob(gateway, store, sink, sample_pdf):
    with pytest.raises(UnknownTopicError) as excinfo:
        gateway.upload("unknown-topic", "notes.pdf", "application/pdf", sample_pdf)

    # the blob was stored before the store rejected the topic; nothing removes it
    assert len(sink.calls) == 1
    assert excinfo.value.details["orphaned_object"] == sink.calls[0][0]
    with pytest.raises(TopicNotFoundError):
        store.get("unknown-topic")


def test_sink_failure_is_surfaced_and_not_retried(store, sample_pdf):
    sink = RecordingSink(fail=True)
    gateway = UploadGateway(store, sink)

    with pytest.raises(SinkUnavailableError):
        gateway.upload("ancient-history", "notes.pdf", "application/pdf", sample_pdf)

    assert len(sink.calls) == 1
    assert store.get("ancient-history").attachment_url is None


def test_object_names_never_collide(store, sink):
    gateway = UploadGateway(store, sink, clock=lambda: 1700000000.0)
    names: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(25):
            name = gateway.object_name("ancient-history")
            with lock:
                names.append(name)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(names) == 100
    assert len(set(names)) == 100


def test_object_names_follow_the_clock(store, sink):
    ticks = iter([1.0, 2.5])
    gateway = UploadGateway(store, sink, clock=lambda: next(ticks))

    assert gateway.object_name("t") == "t-1000.pdf"
    assert gateway.object_name("t") == "t-2500.pdf"


@pytest.mark.parametrize(
    ("topic", "expected"),
    [
        ("ancient-history", "ancient-history"),
        ("../../etc/passwd", "_.._etc_passwd"),
        ("world war 2", "world_war_2"),
        ("...", "topic"),
    ],
)
def test_safe_key(topic, expected):
    assert safe_key(topic) == expected
