"""Streaming batch transformation: dispatch, settlement and event emission."""

from __future__ import annotations

from .emitter import TransformEmitter, TransformEvent, TransformEventKind
from .runner import BatchTransformer, ElementParser, TransformSummary

__all__ = [
    "BatchTransformer",
    "ElementParser",
    "TransformEmitter",
    "TransformEvent",
    "TransformEventKind",
    "TransformSummary",
]
