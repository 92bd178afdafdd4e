from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from pymarc import Record

from tests.helpers.records import RecordingSink, make_author_record, make_authority_record

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(scope="session")
def batch_bytes() -> bytes:
    return (DATA_DIR / "batch.json").read_bytes()


@pytest.fixture
def batch_payloads(batch_bytes: bytes) -> list[dict[str, Any]]:
    return json.loads(batch_bytes)


@pytest.fixture
def author_record() -> Record:
    return make_author_record()


@pytest.fixture
def authority_record() -> Record:
    return make_authority_record()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
