"""Apply change descriptors to a target record.

The engine is a left fold over ``MutationContext.changes``: each descriptor
sees the record as left by the previous one, in input order. Recognised
descriptors are delegated to ``RecordActions``; ``UnrecognizedChange`` is
skipped without error.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .dto import AddFields, RemoveSubfields, ReplaceValue, UnrecognizedChange
from .record_actions import DefaultRecordActions

if TYPE_CHECKING:
    from pymarc import Record

    from linktransform.domain.ports.record_actions import RecordActions

    from .dto import ChangeDescriptor, MutationContext

log = getLogger(__name__)


def apply_changes(context: MutationContext, *, actions: RecordActions | None = None) -> Record:
    """Fold every change of ``context`` into its record and return the result."""

    effective_actions = actions or DefaultRecordActions()
    record = context.record
    total = len(context.changes)
    for index, change in enumerate(context.changes, start=1):
        log.debug("Applying change %d/%d: %s", index, total, type(change).__name__)
        record = apply_change(
            change,
            record,
            context=context,
            actions=effective_actions,
        )
    log.debug("Changes done (%d applied)", total)
    return record


def apply_change(
    change: ChangeDescriptor,
    record: Record,
    *,
    context: MutationContext,
    actions: RecordActions,
) -> Record:
    """Apply a single descriptor to ``record``; source and link data come from ``context``."""

    if isinstance(change, AddFields):
        return _apply_add(change, record, context=context, actions=actions)
    if isinstance(change, ReplaceValue):
        return actions.replace_value_in_field(context.source_record, record, change)
    if isinstance(change, RemoveSubfields):
        return actions.remove_subfields(record, change)
    if isinstance(change, UnrecognizedChange):
        log.debug("Skipping unrecognized change %r", change.raw)
        return record
    raise TypeError(f"Unsupported change descriptor: {type(change).__name__}")


def _apply_add(
    change: AddFields,
    record: Record,
    *,
    context: MutationContext,
    actions: RecordActions,
) -> Record:
    candidates = actions.convert_link_data(context.link_data, change)
    unique = actions.filter_existing_fields(candidates, record, change.duplicate_filter_codes)
    log.debug(
        "Add %s: %d candidate(s), %d new",
        change.template.tag,
        len(candidates),
        len(unique),
    )
    if not unique:
        return record
    return actions.add_or_replace_fields(record, unique, change)
