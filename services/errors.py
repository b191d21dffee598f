"""Exceptions raised by the conversion engine."""

from __future__ import annotations

from typing import Any, Optional


class ConversionError(Exception):
    """Base class for deterministic conversion failures."""

    code = "CONVERSION_FAILED"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value


class InvalidValueError(ConversionError):
    """The temperature value is not a finite real number."""

    code = "INVALID_TEMPERATURE_VALUE"


class InvalidUnitError(ConversionError):
    """A source or target unit is outside the supported set."""

    code = "INVALID_TEMPERATURE_UNIT"


class InvalidPrecisionError(ConversionError):
    """The precision context is not one of the known rounding policies."""

    code = "INVALID_PRECISION_CONTEXT"


class BelowAbsoluteZeroError(ConversionError):
    """The value is physically impossible in its stated unit."""

    code = "BELOW_ABSOLUTE_ZERO"


class BatchItemFailureError(ConversionError):
    """A single batch item failed; the whole batch is rejected."""

    code = "BATCH_ITEM_FAILED"

    def __init__(self, index: int, cause: ConversionError) -> None:
        field = cause.field
        if field and field.startswith("temperature."):
            field = f"temperatures.{index}.{field.split('.', 1)[1]}"
        super().__init__(
            f"Batch item {index} failed: {cause.message}",
            field=field,
            value=cause.value,
        )
        self.index = index
        self.cause = cause
