"""Port definitions for the field-level primitives used by the change engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pymarc import Field, Record

    from linktransform.domain.changes.dto import AddFields, RemoveSubfields, ReplaceValue


class RecordActions(Protocol):
    """Collaborators the engine delegates each descriptor to.

    Implementations may mutate ``record`` in place; the engine always continues
    with the returned record.
    """

    def convert_link_data(self, link_data: Any, change: AddFields) -> list[Field]: ...

    def filter_existing_fields(
        self,
        candidates: Sequence[Field],
        record: Record,
        duplicate_filter_codes: Sequence[str],
    ) -> list[Field]: ...

    def add_or_replace_fields(
        self,
        record: Record,
        fields: Sequence[Field],
        change: AddFields,
    ) -> Record: ...

    def replace_value_in_field(
        self,
        source_record: Record | None,
        record: Record,
        change: ReplaceValue,
    ) -> Record: ...

    def remove_subfields(self, record: Record, change: RemoveSubfields) -> Record: ...
