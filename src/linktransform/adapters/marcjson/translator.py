"""Translate batch element payloads into domain objects and results back to JSON."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from pymarc import Subfield

from linktransform.domain.changes import (
    AddFields,
    CollectRule,
    FieldTemplate,
    RemoveSubfields,
    ReplaceValue,
    SourceLocator,
    TargetLocator,
    UnrecognizedChange,
)
from linktransform.domain.changes.dto import PLACEHOLDER
from linktransform.domain.conversion import ConversionInput
from linktransform.domain.errors import RecordFormatError
from linktransform.domain.model import control_field, data_field, is_control_tag, new_record

from .schema import (
    AddChangePayload,
    CodeSelector,
    InputElementPayload,
    RecordPayload,
    RemoveSubfieldsChangePayload,
    ReplaceChangePayload,
)

if TYPE_CHECKING:
    from pymarc import Field, Record

    from linktransform.domain.changes import ChangeDescriptor
    from linktransform.domain.conversion import ConversionResult

    from .schema import FieldPayload, SubfieldPayload

ADD_KEY = "add"
FROM_KEY = "from"
TO_KEY = "to"
REMOVE_SUBFIELDS_KEY = "removeSubfields"


def parse_input_element(raw: Any) -> ConversionInput:
    """Build a ``ConversionInput`` from one element of the input array."""

    try:
        payload = InputElementPayload.model_validate(raw)
    except ValidationError as exc:
        raise RecordFormatError(f"Invalid batch element: {exc}") from exc

    source_record = None
    if payload.source_record is not None:
        source_record = record_from_payload(payload.source_record)
    return ConversionInput(
        record=record_from_payload(payload.record),
        changes=tuple(parse_change(change) for change in payload.changes),
        source_record=source_record,
        link_data=payload.link_data,
    )


def parse_change(raw: Any) -> ChangeDescriptor:
    """Classify a descriptor by shape; the first matching shape wins.

    Anything that is not an add, replace or remove-subfields descriptor becomes
    ``UnrecognizedChange``.
    """

    if not isinstance(raw, Mapping):
        return UnrecognizedChange(raw=raw)
    try:
        if ADD_KEY in raw:
            return _add_fields(AddChangePayload.model_validate(raw))
        if FROM_KEY in raw and TO_KEY in raw:
            return _replace_value(ReplaceChangePayload.model_validate(raw))
        if REMOVE_SUBFIELDS_KEY in raw:
            return _remove_subfields(RemoveSubfieldsChangePayload.model_validate(raw))
    except ValidationError as exc:
        raise RecordFormatError(f"Invalid change descriptor: {exc}") from exc
    return UnrecognizedChange(raw=raw)


def record_from_payload(payload: RecordPayload | Mapping[str, Any]) -> Record:
    if not isinstance(payload, RecordPayload):
        try:
            payload = RecordPayload.model_validate(payload)
        except ValidationError as exc:
            raise RecordFormatError(f"Invalid record: {exc}") from exc
    return new_record(
        [_field_from_payload(field_payload) for field_payload in payload.fields],
        leader=payload.leader,
    )


def record_to_payload(record: Record) -> dict[str, Any]:
    return {
        "leader": str(record.leader),
        "fields": [_field_to_payload(marc_field) for marc_field in record.fields],
    }


def result_to_payload(result: ConversionResult) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "updated": result.updated,
        "record": None if result.record is None else record_to_payload(result.record),
    }
    if result.messages:
        payload["messages"] = list(result.messages)
    if result.failed:
        payload["failed"] = True
    return payload


def _field_from_payload(payload: FieldPayload) -> Field:
    if is_control_tag(payload.tag):
        if payload.subfields:
            raise RecordFormatError(f"Control field {payload.tag} cannot carry subfields")
        return control_field(payload.tag, payload.value or "")
    if payload.value is not None:
        raise RecordFormatError(f"Field {payload.tag} carries a value but is not a control field")
    return data_field(
        payload.tag,
        _subfields(payload.subfields or []),
        ind1=payload.ind1,
        ind2=payload.ind2,
    )


def _field_to_payload(marc_field: Field) -> dict[str, Any]:
    if marc_field.is_control_field():
        return {"tag": marc_field.tag, "value": marc_field.data}
    return {
        "tag": marc_field.tag,
        "ind1": marc_field.indicator1,
        "ind2": marc_field.indicator2,
        "subfields": [
            {"code": subfield.code, "value": subfield.value} for subfield in marc_field.subfields
        ],
    }


def _subfields(payloads: list[SubfieldPayload]) -> list[Subfield]:
    return [Subfield(code=payload.code, value=payload.value) for payload in payloads]


def _add_fields(payload: AddChangePayload) -> AddFields:
    template = payload.add
    return AddFields(
        template=FieldTemplate(
            tag=template.tag,
            ind1=template.ind1,
            ind2=template.ind2,
            subfields=tuple(_subfields(template.subfields)),
        ),
        order=tuple(payload.order),
        duplicate_filter_codes=tuple(payload.duplicate_filter_codes),
    )


def _replace_value(payload: ReplaceChangePayload) -> ReplaceValue:
    source_value = payload.from_.value
    if isinstance(source_value, CodeSelector):
        source = SourceLocator(tag=payload.from_.tag, code=source_value.code)
    else:
        source = SourceLocator(tag=payload.from_.tag, rule=source_value)

    target = payload.to
    where = None
    if target.where is not None:
        where = CollectRule(
            collect=tuple(target.where.collect),
            source_tag=target.where.from_.tag,
            target_tag=target.where.to.tag,
        )
    return ReplaceValue(
        source=source,
        target=TargetLocator(
            tag=target.tag,
            code=target.value.code,
            format=target.format or PLACEHOLDER,
            where=where,
        ),
        order=tuple(payload.order),
    )


def _remove_subfields(payload: RemoveSubfieldsChangePayload) -> RemoveSubfields:
    locator = payload.remove_subfields
    return RemoveSubfields(tag=locator.tag, code=locator.code, value=locator.value)
