"""Pydantic models describing the batch element payloads."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

CONTROL_VALUE = "value"
COLLECT_VALUE = "collect"


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class MarcJsonBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SubfieldPayload(MarcJsonBaseModel):
    code: str
    value: str = ""


class FieldPayload(MarcJsonBaseModel):
    """A control field (``value``) or a data field (``ind1``/``ind2``/``subfields``)."""

    tag: str
    ind1: str = " "
    ind2: str = " "
    subfields: list[SubfieldPayload] | None = None
    value: str | None = None

    @model_validator(mode="after")
    def _require_content(self) -> FieldPayload:
        if self.value is None and self.subfields is None:
            self.subfields = []
        return self


class RecordPayload(MarcJsonBaseModel):
    leader: str = ""
    fields: list[FieldPayload] = Field(default_factory=list)

    _normalize_fields = field_validator("fields", mode="before")(_none_to_list)


class InputElementPayload(MarcJsonBaseModel):
    """One element of the top-level input array."""

    record: RecordPayload
    changes: list[Any] = Field(default_factory=list)
    source_record: RecordPayload | None = Field(
        default=None,
        validation_alias=AliasChoices("sourceRecord", "hostRecord", "source_record"),
    )
    link_data: Any = Field(
        default=None,
        validation_alias=AliasChoices("linkData", "link_data"),
    )

    _normalize_changes = field_validator("changes", mode="before")(_none_to_list)


class FieldTemplatePayload(MarcJsonBaseModel):
    tag: str
    ind1: str = " "
    ind2: str = " "
    subfields: list[SubfieldPayload] = Field(default_factory=list)


class AddChangePayload(MarcJsonBaseModel):
    add: FieldTemplatePayload
    order: list[str] = Field(default_factory=list)
    duplicate_filter_codes: list[str] = Field(
        default_factory=list,
        alias="duplicateFilterCodes",
    )


class CodeSelector(MarcJsonBaseModel):
    code: str


class SourceLocatorPayload(MarcJsonBaseModel):
    """``value`` is an extraction rule (``"value"`` for a control field) or ``{"code": ...}``."""

    tag: str
    value: CodeSelector | str = CONTROL_VALUE


class CollectLocatorPayload(MarcJsonBaseModel):
    tag: str
    value: str = COLLECT_VALUE


class WherePayload(MarcJsonBaseModel):
    collect: list[str] = Field(default_factory=list)
    from_: CollectLocatorPayload = Field(alias="from")
    to: CollectLocatorPayload


class TargetLocatorPayload(MarcJsonBaseModel):
    tag: str
    value: CodeSelector
    format: str | None = None
    where: WherePayload | None = None


class ReplaceChangePayload(MarcJsonBaseModel):
    from_: SourceLocatorPayload = Field(alias="from")
    to: TargetLocatorPayload
    order: list[str] = Field(default_factory=list)


class RemoveSubfieldsLocatorPayload(MarcJsonBaseModel):
    tag: str
    code: str
    value: str = "*"


class RemoveSubfieldsChangePayload(MarcJsonBaseModel):
    remove_subfields: RemoveSubfieldsLocatorPayload = Field(alias="removeSubfields")
