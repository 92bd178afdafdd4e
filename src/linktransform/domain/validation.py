"""End-of-pipeline validation and fix-up pass for converted records."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from pymarc import Subfield

from linktransform.domain.model import remove_field, remove_subfields

if TYPE_CHECKING:
    from pymarc import Field, Record

log = getLogger(__name__)

TAG_LENGTH = 3


@dataclass(slots=True)
class ValidationReport:
    """Outcome of the validation pass; ``record`` is the (possibly fixed) record."""

    record: Record
    messages: list[str] = field(default_factory=list[str])
    failed: bool = False


class RecordValidator(Protocol):
    """Callable run on every folded record before the update decision."""

    def __call__(self, record: Record, *, validate: bool, fix: bool) -> ValidationReport: ...


def validate_record(record: Record, *, validate: bool, fix: bool) -> ValidationReport:
    """Optionally repair ``record`` in place, then optionally report what is still wrong."""

    if fix:
        _fix_record(record)
    if not validate:
        return ValidationReport(record=record)

    messages = [message for marc_field in record.fields for message in _field_issues(marc_field)]
    if messages:
        log.debug("Record failed validation: %s", messages)
    return ValidationReport(record=record, messages=messages, failed=bool(messages))


def _fix_record(record: Record) -> None:
    for marc_field in list(record.fields):
        if marc_field.is_control_field():
            continue
        marc_field.subfields = [
            Subfield(code=subfield.code, value=subfield.value.strip())
            for subfield in marc_field.subfields
        ]
        remove_subfields(marc_field, lambda subfield: not subfield.value)
        if not marc_field.subfields:
            log.debug("Dropping empty field %s", marc_field.tag)
            remove_field(record, marc_field)


def _field_issues(marc_field: Field) -> list[str]:
    issues: list[str] = []
    if len(marc_field.tag) != TAG_LENGTH:
        issues.append(f"Invalid tag {marc_field.tag!r}")
    if marc_field.is_control_field():
        return issues
    for name, indicator in (("ind1", marc_field.indicator1), ("ind2", marc_field.indicator2)):
        if len(indicator) != 1:
            issues.append(f"Field {marc_field.tag} has invalid {name} {indicator!r}")
    if not marc_field.subfields:
        issues.append(f"Field {marc_field.tag} has no subfields")
    return issues
