"""Turn opaque link data into concrete fields using an ``AddFields`` template."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pymarc import Subfield

from linktransform.domain.model import data_field

from .dto import PLACEHOLDER

if TYPE_CHECKING:
    from pymarc import Field

    from .dto import AddFields, FieldTemplate

log = getLogger(__name__)


def format_value(template: str, value: str) -> str:
    """Substitute every ``%s`` placeholder in ``template`` with ``value``."""

    return template.replace(PLACEHOLDER, value)


def convert_link_data_to_fields(link_data: Any, change: AddFields) -> list[Field]:
    """Build one candidate field per link-data entry.

    Entries may be scalars (fill every placeholder), sequences (fill placeholder
    subfields positionally) or mappings keyed by subfield code. Entries that do
    not fill a single placeholder produce no field. Booleans never fill a
    placeholder.
    """

    if link_data is None:
        return []
    entries = link_data if _is_sequence(link_data) else [link_data]

    fields: list[Field] = []
    for entry in entries:
        built = _build_field(change.template, entry)
        if built is None:
            log.debug("Link data entry %r produced no field for %s", entry, change.template.tag)
            continue
        fields.append(built)
    return fields


def _build_field(template: FieldTemplate, entry: Any) -> Field | None:
    subfields: list[Subfield] = []
    filled = 0
    position = 0
    for template_subfield in template.subfields:
        if PLACEHOLDER not in template_subfield.value:
            subfields.append(Subfield(code=template_subfield.code, value=template_subfield.value))
            continue

        value = _entry_value(entry, code=template_subfield.code, position=position)
        position += 1
        if value is None:
            continue
        subfields.append(
            Subfield(code=template_subfield.code, value=format_value(template_subfield.value, value))
        )
        filled += 1

    if filled == 0:
        return None
    return data_field(template.tag, subfields, ind1=template.ind1, ind2=template.ind2)


def _entry_value(entry: Any, *, code: str, position: int) -> str | None:
    if isinstance(entry, Mapping):
        value = entry.get(code)
    elif _is_sequence(entry):
        value = entry[position] if position < len(entry) else None
    else:
        value = entry

    # booleans and nested containers carry no subfield text
    if value is None or isinstance(value, (bool, Mapping)) or _is_sequence(value):
        return None
    text = str(value)
    return text or None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
