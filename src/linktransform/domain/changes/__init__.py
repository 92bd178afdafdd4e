"""Change descriptors and the engine that applies them."""

from __future__ import annotations

from .apply import apply_change, apply_changes
from .dto import (
    AddFields,
    ChangeDescriptor,
    CollectRule,
    FieldTemplate,
    MutationContext,
    RemoveSubfields,
    ReplaceValue,
    SourceLocator,
    TargetLocator,
    UnrecognizedChange,
)
from .record_actions import DefaultRecordActions

__all__ = [
    "AddFields",
    "ChangeDescriptor",
    "CollectRule",
    "DefaultRecordActions",
    "FieldTemplate",
    "MutationContext",
    "RemoveSubfields",
    "ReplaceValue",
    "SourceLocator",
    "TargetLocator",
    "UnrecognizedChange",
    "apply_change",
    "apply_changes",
]
