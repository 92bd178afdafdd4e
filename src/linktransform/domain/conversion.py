"""Convert one batch element: snapshot, fold changes, validate, decide."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from linktransform.domain.changes import MutationContext, apply_changes
from linktransform.domain.model import clone_record, records_equal
from linktransform.domain.validation import validate_record

if TYPE_CHECKING:
    from pymarc import Record

    from linktransform.domain.changes import ChangeDescriptor
    from linktransform.domain.ports.record_actions import RecordActions
    from linktransform.domain.validation import RecordValidator

log = getLogger(__name__)

NO_UPDATE_MESSAGE = "No update needed!"


@dataclass(frozen=True, slots=True)
class ConversionInput:
    """One parsed batch element."""

    record: Record
    changes: tuple[ChangeDescriptor, ...] = ()
    source_record: Record | None = None
    link_data: Any = None


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Per-element outcome.

    ``record`` is ``None`` only for failed conversions whose record could not be
    built or changed.
    """

    updated: bool
    record: Record | None
    messages: tuple[str, ...] = ()
    failed: bool = False

    @classmethod
    def failure(cls, error: BaseException) -> ConversionResult:
        return cls(updated=False, record=None, messages=(str(error),), failed=True)


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    validate: bool = False
    fix: bool = False
    validator: RecordValidator = field(default=validate_record)


def decide(original: Record, final: Record) -> ConversionResult:
    """Classify ``final`` against the pre-change snapshot ``original``."""

    if not records_equal(original, final):
        return ConversionResult(updated=True, record=final)
    return ConversionResult(updated=False, record=final, messages=(NO_UPDATE_MESSAGE,))


def convert_record(
    data: ConversionInput,
    *,
    options: ConversionOptions | None = None,
    actions: RecordActions | None = None,
) -> ConversionResult:
    """Apply ``data.changes`` to ``data.record`` and report whether anything changed."""

    effective_options = options or ConversionOptions()
    snapshot = clone_record(data.record)
    context = MutationContext(
        record=data.record,
        changes=data.changes,
        source_record=data.source_record,
        link_data=data.link_data,
    )
    log.debug("Updating record with %d change(s)", len(data.changes))
    final = apply_changes(context, actions=actions)

    report = None
    if effective_options.validate or effective_options.fix:
        report = effective_options.validator(
            final,
            validate=effective_options.validate,
            fix=effective_options.fix,
        )
        final = report.record

    result = decide(snapshot, final)
    if report is None or not (report.messages or report.failed):
        return result
    return ConversionResult(
        updated=result.updated,
        record=result.record,
        messages=(*result.messages, *report.messages),
        failed=report.failed,
    )
