"""Change descriptor DTOs (source-agnostic).

A change descriptor is one declarative mutation step. The set of variants is
closed: ``ChangeDescriptor`` is the union of the three recognised shapes plus
``UnrecognizedChange``, which the engine skips without complaint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias, Union

from linktransform.domain.model import BLANK_INDICATOR

if TYPE_CHECKING:
    from pymarc import Record, Subfield

PLACEHOLDER = "%s"
MATCH_ANY_VALUE = "*"
CONTROL_VALUE_RULE = "value"


@dataclass(frozen=True, slots=True)
class FieldTemplate:
    """Blueprint for fields built from link data; values may hold ``%s``."""

    tag: str
    subfields: tuple[Subfield, ...]
    ind1: str = BLANK_INDICATOR
    ind2: str = BLANK_INDICATOR


@dataclass(frozen=True, slots=True)
class AddFields:
    """Add fields derived from link data, skipping ones the record already has."""

    template: FieldTemplate
    order: tuple[str, ...] = ()
    duplicate_filter_codes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SourceLocator:
    """Where to read a value in the source record.

    A ``code`` selects the first such subfield of ``tag``. Without one, ``rule``
    names how to extract the value; only ``"value"`` (the control field value)
    is supported.
    """

    tag: str
    code: str | None = None
    rule: str = CONTROL_VALUE_RULE


@dataclass(frozen=True, slots=True)
class CollectRule:
    """Restrict a replacement to target fields matching the source on ``collect`` codes."""

    collect: tuple[str, ...]
    source_tag: str
    target_tag: str


@dataclass(frozen=True, slots=True)
class TargetLocator:
    """Where and how to write the replacement value in the target record."""

    tag: str
    code: str
    format: str = PLACEHOLDER
    where: CollectRule | None = None


@dataclass(frozen=True, slots=True)
class ReplaceValue:
    """Copy a formatted value from the source record into the target record."""

    source: SourceLocator
    target: TargetLocator
    order: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RemoveSubfields:
    """Delete subfields by tag, code and value (``"*"`` matches any value)."""

    tag: str
    code: str
    value: str = MATCH_ANY_VALUE

    def matches(self, value: str) -> bool:
        return self.value == MATCH_ANY_VALUE or value == self.value


@dataclass(frozen=True, slots=True)
class UnrecognizedChange:
    """A descriptor matching none of the known shapes; applying it changes nothing."""

    raw: Any = None


ChangeDescriptor: TypeAlias = Union[AddFields, ReplaceValue, RemoveSubfields, UnrecognizedChange]


@dataclass(frozen=True, slots=True)
class MutationContext:
    """Inputs of one conversion.

    Only ``record`` is mutated while changes are applied; the source record and
    link data are read-only for the whole fold.
    """

    record: Record
    changes: tuple[ChangeDescriptor, ...] = field(default_factory=tuple)
    source_record: Record | None = None
    link_data: Any = None
