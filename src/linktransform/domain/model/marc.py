"""Helpers around ``pymarc`` records.

Records, fields and subfields are plain ``pymarc`` objects. ``pymarc`` fields
have no value equality, so the change engine compares records through
``record_key``: two records are equal when their leaders match and their
fields match field-for-field, subfield-for-subfield, in order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pymarc import Field, Indicators, Record, Subfield

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

BLANK_INDICATOR = " "
LEADER_LENGTH = 24
CONTROL_TAG_LIMIT = "010"

FieldKey = tuple[Any, ...]


def is_control_tag(tag: str) -> bool:
    """Tags ``001``-``009`` hold a bare value, like ``Field.is_control_field``."""

    return tag.isdigit() and tag.zfill(3) < CONTROL_TAG_LIMIT


def control_field(tag: str, value: str) -> Field:
    return Field(tag=tag, data=value)


def data_field(
    tag: str,
    subfields: Iterable[Subfield] = (),
    *,
    ind1: str = BLANK_INDICATOR,
    ind2: str = BLANK_INDICATOR,
) -> Field:
    return Field(tag=tag, indicators=Indicators(ind1, ind2), subfields=list(subfields))


def new_record(fields: Iterable[Field] = (), *, leader: str = "") -> Record:
    """Build a record; a leader of the wrong length falls back to ``pymarc``'s default."""

    if len(leader) == LEADER_LENGTH:
        record = Record(leader=leader, force_utf8=True)
    else:
        record = Record(force_utf8=True)
    record.add_field(*fields)
    return record


def clone_field(marc_field: Field) -> Field:
    if marc_field.is_control_field():
        return control_field(marc_field.tag, marc_field.data)
    return data_field(
        marc_field.tag,
        marc_field.subfields,
        ind1=marc_field.indicator1,
        ind2=marc_field.indicator2,
    )


def clone_record(record: Record) -> Record:
    return new_record(
        (clone_field(marc_field) for marc_field in record.fields),
        leader=str(record.leader),
    )


def field_key(marc_field: Field) -> FieldKey:
    if marc_field.is_control_field():
        return (marc_field.tag, marc_field.data)
    return (
        marc_field.tag,
        marc_field.indicator1,
        marc_field.indicator2,
        tuple((subfield.code, subfield.value) for subfield in marc_field.subfields),
    )


def record_key(record: Record) -> tuple[str, tuple[FieldKey, ...]]:
    return str(record.leader), tuple(field_key(marc_field) for marc_field in record.fields)


def records_equal(first: Record, second: Record) -> bool:
    return record_key(first) == record_key(second)


def get_control_value(record: Record, tag: str) -> str | None:
    for marc_field in record.get_fields(tag):
        if marc_field.is_control_field():
            return marc_field.data
    return None


def insert_field(record: Record, marc_field: Field) -> None:
    """Insert before the first field with a greater tag, after any equal ones."""

    for index, existing in enumerate(record.fields):
        if existing.tag > marc_field.tag:
            record.fields.insert(index, marc_field)
            return
    record.fields.append(marc_field)


def replace_field(record: Record, old: Field, new: Field) -> None:
    record.fields[_index_of(record, old)] = new


def remove_field(record: Record, marc_field: Field) -> None:
    del record.fields[_index_of(record, marc_field)]


def remove_subfields(marc_field: Field, predicate: Callable[[Subfield], bool]) -> int:
    """Drop every subfield matching ``predicate`` and return how many were removed."""

    kept = [subfield for subfield in marc_field.subfields if not predicate(subfield)]
    removed = len(marc_field.subfields) - len(kept)
    marc_field.subfields = kept
    return removed


def _index_of(record: Record, marc_field: Field) -> int:
    # identity, not equality: a record may hold several equal fields
    for index, existing in enumerate(record.fields):
        if existing is marc_field:
            return index
    raise ValueError(f"field {marc_field.tag} is not part of this record")
