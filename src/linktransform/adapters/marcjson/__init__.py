"""Public interface for the MARC-in-JSON batch adapter."""

from __future__ import annotations

from .reader import ArrayAssembler, iter_array_elements
from .schema import InputElementPayload, RecordPayload
from .translator import (
    parse_change,
    parse_input_element,
    record_from_payload,
    record_to_payload,
    result_to_payload,
)

__all__ = [
    "ArrayAssembler",
    "InputElementPayload",
    "RecordPayload",
    "iter_array_elements",
    "parse_change",
    "parse_input_element",
    "record_from_payload",
    "record_to_payload",
    "result_to_payload",
]
