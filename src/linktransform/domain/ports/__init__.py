"""Domain ports (interfaces) for collaborators and result consumers."""

from __future__ import annotations

from .events import TransformSink
from .record_actions import RecordActions

__all__ = [
    "RecordActions",
    "TransformSink",
]
