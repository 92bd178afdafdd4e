"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import functools
import json
import sys
from logging import getLogger
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from linktransform.adapters.marcjson import (
    iter_array_elements,
    parse_input_element,
    result_to_payload,
)
from linktransform.config import TransformConfig, get_transform_config
from linktransform.domain.conversion import ConversionOptions
from linktransform.domain.errors import IngestError
from linktransform.domain.transform_pipeline import (
    BatchTransformer,
    TransformEmitter,
    TransformEventKind,
    TransformSummary,
)

if TYPE_CHECKING:
    from linktransform.domain.conversion import ConversionResult
    from linktransform.domain.ports.events import TransformSink
    from linktransform.domain.ports.record_actions import RecordActions

STDIN_PATH = "-"

log = getLogger(__name__)

# strong references for runs started by ``ingest`` until they finish
_background_runs: set[asyncio.Task[TransformSummary]] = set()


class JsonLinesSink:
    """Write each event as one JSON object per line."""

    def __init__(self, output: IO[str]) -> None:
        self._output = output

    def on_record(self, result: ConversionResult) -> None:
        self._write({"event": TransformEventKind.RECORD.value, **result_to_payload(result)})

    def on_end(self, count: int) -> None:
        self._write({"event": TransformEventKind.END.value, "count": count})

    def on_error(self, error: IngestError) -> None:
        self._write({"event": TransformEventKind.ERROR.value, "message": str(error)})

    def _write(self, payload: dict[str, Any]) -> None:
        self._output.write(json.dumps(payload, ensure_ascii=False))
        self._output.write("\n")
        self._output.flush()


def build_transformer(
    config: TransformConfig | None = None,
    *,
    actions: RecordActions | None = None,
) -> BatchTransformer:
    effective_config = config or get_transform_config()
    return BatchTransformer(
        parse_element=parse_input_element,
        options=ConversionOptions(validate=effective_config.validate, fix=effective_config.fix),
        actions=actions,
        max_in_flight=effective_config.max_in_flight,
    )


async def transform_stream(
    source: Any,
    *,
    sink: TransformSink,
    config: TransformConfig | None = None,
    actions: RecordActions | None = None,
) -> TransformSummary:
    """Transform every element of the JSON array in ``source``, reporting to ``sink``."""

    transformer = build_transformer(config, actions=actions)
    return await transformer.run(iter_array_elements(source), sink=sink)


def ingest(
    source: Any,
    *,
    config: TransformConfig | None = None,
    actions: RecordActions | None = None,
) -> TransformEmitter:
    """Start transforming ``source`` in the background and return its event channel.

    Must be called from a running event loop. Consume the returned emitter with
    ``async for``; iteration ends with the ``end`` or ``error`` event.
    """

    emitter = TransformEmitter()
    task = asyncio.create_task(
        transform_stream(source, sink=emitter, config=config, actions=actions)
    )
    _background_runs.add(task)
    task.add_done_callback(_background_runs.discard)
    task.add_done_callback(functools.partial(_close_on_crash, emitter))
    return emitter


def _close_on_crash(emitter: TransformEmitter, task: asyncio.Task[TransformSummary]) -> None:
    if task.cancelled() or emitter.closed:
        return
    exc = task.exception()
    if exc is not None:
        log.error("Transformation crashed: %s", exc, exc_info=exc)
        emitter.on_error(IngestError(f"Transformation aborted: {exc}"))


def transform_file(
    path: str | Path,
    *,
    output: IO[str] | None = None,
    config: TransformConfig | None = None,
) -> TransformSummary:
    """Transform a JSON array file (``"-"`` for stdin) and write JSON-lines events."""

    effective_config = config or get_transform_config()
    sink = JsonLinesSink(output or sys.stdout)
    log.info(
        "Starting transformation: source=%s, validate=%s, fix=%s, max_in_flight=%s",
        path,
        effective_config.validate,
        effective_config.fix,
        effective_config.max_in_flight,
    )

    if str(path) == STDIN_PATH:
        summary = asyncio.run(
            transform_stream(sys.stdin.buffer, sink=sink, config=effective_config)
        )
    else:
        with Path(path).open("rb") as handle:
            summary = asyncio.run(transform_stream(handle, sink=sink, config=effective_config))

    log.info(
        f"Finished transformation: dispatched={summary.dispatched}, updated={summary.updated}, "
        f"unchanged={summary.unchanged}, failed={summary.failed}"
    )
    return summary
