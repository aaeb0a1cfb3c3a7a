from __future__ import annotations

from pathlib import Path

import pytest

from core.settings import SeedRecord, Settings, StoreSettings
from tests.fakes import SAMPLE_PDF, RecordingSink


@pytest.fixture()
def sample_pdf() -> bytes:
    return SAMPLE_PDF


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    raw = Settings(
        data_root=tmp_path,
        store=StoreSettings(
            backend="json",
            seed={"ancient-history": SeedRecord(title="Ancient History", description="Default notes.")},
        ),
    )
    return raw.resolve({})


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()
