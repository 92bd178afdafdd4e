"""Incremental reader for a top-level JSON array.

Elements are assembled from ``ijson`` parse events and yielded as soon as each
one is complete, so the array never has to fit in memory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import ijson

from linktransform.domain.errors import IngestError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

_CONTAINER_START = frozenset({"start_map", "start_array"})
_CONTAINER_END = frozenset({"end_map", "end_array"})


class ArrayAssembler:
    """Turn ``ijson.parse`` events of a top-level array into its elements."""

    def __init__(self) -> None:
        self._started = False
        self._finished = False
        self._builder: ijson.ObjectBuilder | None = None
        self._depth = 0

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, prefix: str, event: str, value: Any) -> Iterator[Any]:
        """Consume one parse event and yield the element it completes, if any."""

        if not self._started:
            if prefix != "" or event != "start_array":
                raise IngestError(f"Expected a JSON array at top level, got {event}")
            self._started = True
            return
        if self._finished:
            raise IngestError("Unexpected data after the top-level array")

        if self._builder is None:
            if event == "end_array" and prefix == "":
                self._finished = True
                return
            if event not in _CONTAINER_START:
                yield value
                return
            self._builder = ijson.ObjectBuilder()
            self._depth = 0

        self._builder.event(event, value)
        if event in _CONTAINER_START:
            self._depth += 1
        elif event in _CONTAINER_END:
            self._depth -= 1
        if self._depth == 0:
            element = self._builder.value
            self._builder = None
            yield element

    def close(self) -> None:
        if not self._finished:
            raise IngestError("Input ended before the top-level array was closed")


async def iter_array_elements(source: Any) -> AsyncIterator[Any]:
    """Yield the elements of the JSON array read from ``source``.

    ``source`` may be ``bytes``, a binary file object or an object with an
    awaitable ``read``. Any parse failure is raised as ``IngestError``.
    """

    assembler = ArrayAssembler()
    try:
        events = ijson.parse(source, use_float=True)
        if hasattr(events, "__aiter__"):
            async for prefix, event, value in events:
                for element in assembler.feed(prefix, event, value):
                    yield element
        else:
            for prefix, event, value in events:
                for element in assembler.feed(prefix, event, value):
                    yield element
    except (ijson.JSONError, OSError, UnicodeDecodeError, ValueError) as exc:
        raise IngestError(f"Unreadable input stream: {exc}") from exc
    assembler.close()
