"""Queue-backed event channel implementing ``TransformSink``."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from linktransform.domain.conversion import ConversionResult
    from linktransform.domain.errors import IngestError


class TransformEventKind(StrEnum):
    RECORD = "record"
    END = "end"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TransformEvent:
    """One emitted event; only the attribute matching ``kind`` is set."""

    kind: TransformEventKind
    result: ConversionResult | None = None
    count: int | None = None
    error: IngestError | None = None

    @property
    def is_terminal(self) -> bool:
        return self.kind is not TransformEventKind.RECORD


class TransformEmitter:
    """Push events into an unbounded queue and replay them with ``async for``.

    Iteration stops after the terminal ``end`` or ``error`` event. The emitter
    is scoped to a single ingest run.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[TransformEvent] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_record(self, result: ConversionResult) -> None:
        self._put(TransformEvent(kind=TransformEventKind.RECORD, result=result))

    def on_end(self, count: int) -> None:
        self._put(TransformEvent(kind=TransformEventKind.END, count=count))

    def on_error(self, error: IngestError) -> None:
        self._put(TransformEvent(kind=TransformEventKind.ERROR, error=error))

    async def __aiter__(self) -> AsyncIterator[TransformEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if event.is_terminal:
                return

    def _put(self, event: TransformEvent) -> None:
        if self._closed:
            raise RuntimeError(f"Emitter already closed; cannot emit {event.kind} event")
        if event.is_terminal:
            self._closed = True
        self._queue.put_nowait(event)
