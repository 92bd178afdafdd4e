"""Field-level primitives used by the change engine.

Every function mutates the target record in place and returns it, so the
engine can thread the record through the fold regardless of which primitive
ran.
"""

from __future__ import annotations

from collections import Counter
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pymarc import Subfield

from linktransform.domain.errors import ChangeApplicationError
from linktransform.domain.model import (
    data_field,
    get_control_value,
    insert_field,
    remove_subfields as drop_subfields,
    replace_field,
)

from .dto import CONTROL_VALUE_RULE
from .link_data import convert_link_data_to_fields, format_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pymarc import Field, Record

    from .dto import AddFields, RemoveSubfields, ReplaceValue, SourceLocator

log = getLogger(__name__)


def sort_subfields(marc_field: Field, order: Sequence[str]) -> Field:
    """Stable-sort subfields: ``order`` codes first, then the rest as they were."""

    if not order or marc_field.is_control_field():
        return marc_field
    rank = {code: index for index, code in enumerate(order)}
    fallback = len(rank)
    marc_field.subfields = sorted(
        marc_field.subfields, key=lambda subfield: rank.get(subfield.code, fallback)
    )
    return marc_field


def filter_existing_fields(
    candidates: Iterable[Field],
    record: Record,
    duplicate_filter_codes: Sequence[str] = (),
) -> list[Field]:
    """Drop candidates that the record (or an earlier candidate) already carries.

    Two fields count as duplicates when they share a tag and hold the same
    subfields for ``duplicate_filter_codes`` (every code when none are given).
    """

    unique: list[Field] = []
    for candidate in candidates:
        key = _subfield_key(candidate, duplicate_filter_codes)
        if not key:
            unique.append(candidate)
            continue
        existing = (*record.get_fields(candidate.tag), *unique)
        if any(
            other.tag == candidate.tag
            and not other.is_control_field()
            and _subfield_key(other, duplicate_filter_codes) == key
            for other in existing
        ):
            log.debug("Skipping duplicate %s field %s", candidate.tag, candidate.subfields)
            continue
        unique.append(candidate)
    return unique


def add_or_replace_fields(
    record: Record,
    fields: Iterable[Field],
    change: AddFields,
) -> Record:
    """Merge ``fields`` into ``record``.

    A new field upgrades an existing same-tag field carrying the same label
    subfields (the codes outside ``duplicate_filter_codes``): the existing link
    subfields are dropped and the new field's subfields take their place.
    Otherwise the new field is inserted in tag order.
    """

    link_codes = frozenset(change.duplicate_filter_codes)
    for new_field in fields:
        label = _label_key(new_field, link_codes)
        target = None
        if label and link_codes:
            target = next(
                (
                    existing
                    for existing in record.get_fields(new_field.tag)
                    if not existing.is_control_field() and _label_key(existing, link_codes) == label
                ),
                None,
            )

        if target is None:
            insert_field(record, sort_subfields(new_field, change.order))
            continue

        kept = [subfield for subfield in target.subfields if subfield.code not in link_codes]
        merged = data_field(
            new_field.tag,
            [*kept, *(subfield for subfield in new_field.subfields if subfield not in kept)],
            ind1=new_field.indicator1,
            ind2=new_field.indicator2,
        )
        log.debug("Upgrading %s field %s", target.tag, target.subfields)
        replace_field(record, target, sort_subfields(merged, change.order))
    return record


def replace_value_in_field(
    source_record: Record | None,
    record: Record,
    change: ReplaceValue,
) -> Record:
    """Write a formatted source-record value into matching target fields.

    The value takes the place of the first ``target.code`` subfield; further
    subfields with that code are dropped. Fields without one get it appended.
    """

    if source_record is None:
        raise ChangeApplicationError(
            f"Replacing {change.target.tag}${change.target.code} requires a source record"
        )

    value = read_source_value(source_record, change.source)
    if value is None:
        raise ChangeApplicationError(
            f"Source record has no value at {_describe_locator(change.source)}"
        )
    formatted = format_value(change.target.format, value)

    targets = [
        marc_field
        for marc_field in record.get_fields(change.target.tag)
        if not marc_field.is_control_field()
    ]
    where = change.target.where
    if where is not None and where.collect:
        wanted = _collected(source_record.get_fields(where.source_tag), where.collect)
        targets = [
            marc_field
            for marc_field in targets
            if marc_field.tag == where.target_tag
            and _collected([marc_field], where.collect) == wanted
        ]

    for marc_field in targets:
        _write_subfield(marc_field, change.target.code, formatted)
        sort_subfields(marc_field, change.order)

    log.debug(
        "Replaced %s$%s in %d field(s) with %r",
        change.target.tag,
        change.target.code,
        len(targets),
        formatted,
    )
    return record


def remove_subfields(record: Record, change: RemoveSubfields) -> Record:
    """Delete matching subfields; emptied fields stay on the record."""

    removed = 0
    for marc_field in record.get_fields(change.tag):
        if marc_field.is_control_field():
            continue
        removed += drop_subfields(
            marc_field,
            lambda subfield: subfield.code == change.code and change.matches(subfield.value),
        )
    log.debug("Removed %d subfield(s) %s$%s", removed, change.tag, change.code)
    return record


def read_source_value(source_record: Record, locator: SourceLocator) -> str | None:
    """Return the first value at ``locator``, or ``None`` when there is none."""

    if locator.code is not None:
        for marc_field in source_record.get_fields(locator.tag):
            if marc_field.is_control_field():
                continue
            values = marc_field.get_subfields(locator.code)
            if values:
                return values[0]
        return None
    if locator.rule != CONTROL_VALUE_RULE:
        raise ChangeApplicationError(
            f"Unsupported extraction rule {locator.rule!r} for source field {locator.tag}"
        )
    return get_control_value(source_record, locator.tag)


def _write_subfield(marc_field: Field, code: str, value: str) -> None:
    written = False
    subfields: list[Subfield] = []
    for subfield in marc_field.subfields:
        if subfield.code != code:
            subfields.append(subfield)
        elif not written:
            subfields.append(Subfield(code=code, value=value))
            written = True
    if not written:
        subfields.append(Subfield(code=code, value=value))
    marc_field.subfields = subfields


def _describe_locator(locator: SourceLocator) -> str:
    if locator.code is None:
        return locator.tag
    return f"{locator.tag}${locator.code}"


def _collected(fields: Sequence[Field], codes: Sequence[str]) -> list[Subfield] | None:
    # first field wins, mirroring read_source_value
    for marc_field in fields:
        if marc_field.is_control_field():
            continue
        return [subfield for subfield in marc_field.subfields if subfield.code in codes]
    return None


def _subfield_key(marc_field: Field, codes: Sequence[str]) -> Counter[tuple[str, str]]:
    selected = (
        subfield for subfield in marc_field.subfields if not codes or subfield.code in codes
    )
    return Counter((subfield.code, subfield.value) for subfield in selected)


def _label_key(marc_field: Field, link_codes: frozenset[str]) -> Counter[tuple[str, str]]:
    return Counter(
        (subfield.code, subfield.value)
        for subfield in marc_field.subfields
        if subfield.code not in link_codes
    )


class DefaultRecordActions:
    """``RecordActions`` backed by the primitives of this module."""

    def convert_link_data(self, link_data: Any, change: AddFields) -> list[Field]:
        return convert_link_data_to_fields(link_data, change)

    def filter_existing_fields(
        self,
        candidates: Sequence[Field],
        record: Record,
        duplicate_filter_codes: Sequence[str],
    ) -> list[Field]:
        return filter_existing_fields(candidates, record, duplicate_filter_codes)

    def add_or_replace_fields(
        self,
        record: Record,
        fields: Sequence[Field],
        change: AddFields,
    ) -> Record:
        return add_or_replace_fields(record, fields, change)

    def replace_value_in_field(
        self,
        source_record: Record | None,
        record: Record,
        change: ReplaceValue,
    ) -> Record:
        return replace_value_in_field(source_record, record, change)

    def remove_subfields(self, record: Record, change: RemoveSubfields) -> Record:
        return remove_subfields(record, change)
