"""Streaming ingest: dispatch one conversion per array element as it arrives."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from linktransform.domain.conversion import ConversionOptions, ConversionResult, convert_record
from linktransform.domain.errors import IngestError

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from linktransform.domain.conversion import ConversionInput
    from linktransform.domain.ports.events import TransformSink
    from linktransform.domain.ports.record_actions import RecordActions

ElementParser = Callable[[Any], "ConversionInput"]


log = getLogger(__name__)


@dataclass(slots=True)
class TransformSummary:
    """Outcome of one ingest run."""

    dispatched: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    error: IngestError | None = None

    def add(self, result: ConversionResult) -> None:
        if result.failed:
            self.failed += 1
        elif result.updated:
            self.updated += 1
        else:
            self.unchanged += 1


@dataclass(slots=True)
class BatchTransformer:
    """Run conversions for a stream of parsed batch elements.

    Every element starts its own task immediately; the conversion itself runs
    in the loop's default executor and its events are emitted back on the
    loop. ``max_in_flight`` bounds
    the number of unfinished conversions; ``None`` leaves dispatch unbounded.
    """

    parse_element: ElementParser
    options: ConversionOptions = field(default_factory=ConversionOptions)
    actions: RecordActions | None = None
    max_in_flight: int | None = None

    async def run(self, elements: AsyncIterable[Any], *, sink: TransformSink) -> TransformSummary:
        """Consume ``elements`` and report every outcome to ``sink``.

        The terminal ``end`` (or ``error``) event is emitted only after every
        dispatched conversion has settled, even when a task failed; that
        failure is re-raised afterwards.
        """

        summary = TransformSummary()
        tasks: list[asyncio.Task[None]] = []
        limiter = asyncio.Semaphore(self.max_in_flight) if self.max_in_flight else None

        try:
            async for element in elements:
                if limiter is not None:
                    await limiter.acquire()
                tasks.append(
                    asyncio.create_task(
                        self._convert(element, sink=sink, summary=summary, limiter=limiter)
                    )
                )
                # let already dispatched conversions make progress while parsing
                await asyncio.sleep(0)
        except IngestError as exc:
            log.error("Ingest aborted after %d element(s): %s", len(tasks), exc)  # noqa: TRY400
            summary.error = exc

        log.info("Handled %d record events", len(tasks))
        settled = await asyncio.gather(*tasks, return_exceptions=True)
        summary.dispatched = len(tasks)
        try:
            for outcome in settled:
                if isinstance(outcome, BaseException):
                    log.error("Record task failed: %s", outcome)
                    raise outcome
        finally:
            if summary.error is not None:
                sink.on_error(summary.error)
            else:
                sink.on_end(summary.dispatched)
        return summary

    async def _convert(
        self,
        element: Any,
        *,
        sink: TransformSink,
        summary: TransformSummary,
        limiter: asyncio.Semaphore | None,
    ) -> None:
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self._convert_element, element)
        finally:
            if limiter is not None:
                limiter.release()

        summary.add(result)
        sink.on_record(result)

    def _convert_element(self, element: Any) -> ConversionResult:
        try:
            data = self.parse_element(element)
            return convert_record(data, options=self.options, actions=self.actions)
        except Exception as exc:
            log.exception("Record conversion failed")
            return ConversionResult.failure(exc)
