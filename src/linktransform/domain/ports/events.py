"""Port definitions for consumers of batch transformation events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from linktransform.domain.conversion import ConversionResult
    from linktransform.domain.errors import IngestError


class TransformSink(Protocol):
    """Receives the events of exactly one ingest run.

    ``on_record`` fires once per array element in completion order; then
    either ``on_end`` (all conversions settled) or ``on_error`` (the stream
    itself was unreadable) fires exactly once.
    """

    def on_record(self, result: ConversionResult) -> None: ...

    def on_end(self, count: int) -> None: ...

    def on_error(self, error: IngestError) -> None: ...
