from __future__ import annotations

import asyncio
import io
from typing import Any

import ijson
import pytest

from linktransform.adapters.marcjson import ArrayAssembler, iter_array_elements
from linktransform.domain.errors import IngestError


class AsyncBytesReader:
    """Minimal async file object handing out the payload in small chunks."""

    def __init__(self, payload: bytes, chunk_size: int = 7) -> None:
        self._buffer = io.BytesIO(payload)
        self._chunk_size = chunk_size

    async def read(self, size: int = -1) -> bytes:
        await asyncio.sleep(0)
        if size == 0:
            return b""
        return self._buffer.read(min(size, self._chunk_size) if size > 0 else self._chunk_size)


def _read_all(source: Any) -> list[Any]:
    async def collect() -> list[Any]:
        return [element async for element in iter_array_elements(source)]

    return asyncio.run(collect())


def _read_until_error(source: Any) -> tuple[list[Any], IngestError]:
    elements: list[Any] = []

    async def collect() -> None:
        async for element in iter_array_elements(source):
            elements.append(element)

    with pytest.raises(IngestError) as excinfo:
        asyncio.run(collect())
    return elements, excinfo.value


def test_reads_elements_from_bytes(batch_bytes: bytes, batch_payloads: list[Any]) -> None:
    assert _read_all(batch_bytes) == batch_payloads


def test_reads_elements_from_file_object(batch_bytes: bytes, batch_payloads: list[Any]) -> None:
    assert _read_all(io.BytesIO(batch_bytes)) == batch_payloads


def test_reads_elements_from_async_source(batch_bytes: bytes, batch_payloads: list[Any]) -> None:
    assert _read_all(AsyncBytesReader(batch_bytes)) == batch_payloads


def test_scalar_and_nested_elements() -> None:
    assert _read_all(b'[1, "two", null, [3, [4]], {"a": {"b": []}}]') == [
        1,
        "two",
        None,
        [3, [4]],
        {"a": {"b": []}},
    ]


def test_empty_array() -> None:
    assert _read_all(b"  [ ]  ") == []


def test_top_level_object_is_rejected() -> None:
    elements, error = _read_until_error(b'{"record": {}}')

    assert elements == []
    assert "Expected a JSON array" in str(error)


def test_truncated_array_keeps_complete_elements() -> None:
    elements, error = _read_until_error(b'[{"a": 1}, {"b": 2}, {"c":')

    assert elements == [{"a": 1}, {"b": 2}]
    assert "Unreadable input stream" in str(error)


def test_malformed_json_is_ingest_error() -> None:
    _, error = _read_until_error(b'[{"a": 1}, nope]')

    assert isinstance(error.__cause__, ijson.JSONError)


def test_trailing_data_is_ingest_error() -> None:
    _, error = _read_until_error(b'[{"a": 1}] [2]')

    assert str(error)


def test_assembler_rejects_data_after_array() -> None:
    assembler = ArrayAssembler()
    list(assembler.feed("", "start_array", None))
    list(assembler.feed("", "end_array", None))

    assert assembler.finished
    with pytest.raises(IngestError, match="after the top-level array"):
        list(assembler.feed("", "start_array", None))


def test_assembler_close_requires_finished_array() -> None:
    assembler = ArrayAssembler()
    list(assembler.feed("", "start_array", None))
    assert list(assembler.feed("item", "number", 5)) == [5]

    with pytest.raises(IngestError, match="before the top-level array was closed"):
        assembler.close()
