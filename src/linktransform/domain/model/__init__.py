"""Domain model for bibliographic records, built on ``pymarc``."""

from __future__ import annotations

from .marc import (
    BLANK_INDICATOR,
    clone_record,
    control_field,
    data_field,
    field_key,
    get_control_value,
    insert_field,
    is_control_tag,
    new_record,
    record_key,
    records_equal,
    remove_field,
    remove_subfields,
    replace_field,
)

__all__ = [
    "BLANK_INDICATOR",
    "clone_record",
    "control_field",
    "data_field",
    "field_key",
    "get_control_value",
    "insert_field",
    "is_control_tag",
    "new_record",
    "record_key",
    "records_equal",
    "remove_field",
    "remove_subfields",
    "replace_field",
]
