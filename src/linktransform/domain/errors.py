"""Error taxonomy for record-link transformation."""

from __future__ import annotations


class TransformError(RuntimeError):
    """Base class for every failure raised while transforming a batch."""


class IngestError(TransformError):
    """Raised when the input stream is not a well-formed JSON array.

    Fatal to the whole batch: parsing stops and the failure is reported once.
    """


class ConversionError(TransformError):
    """Raised when a single batch element cannot be converted.

    Local to one element; sibling conversions and end-of-batch accounting carry on.
    """


class RecordFormatError(ConversionError):
    """Raised when an element or record payload cannot be read."""


class ChangeApplicationError(ConversionError):
    """Raised when a change descriptor cannot be applied to the target record."""
