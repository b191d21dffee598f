"""Domain models for temperature conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple


class TemperatureUnit(str, Enum):
    """Supported temperature scales."""

    celsius = "celsius"
    fahrenheit = "fahrenheit"
    kelvin = "kelvin"


class PrecisionContext(str, Enum):
    """Rounding policies selectable by callers."""

    consumer = "consumer"
    industrial = "industrial"
    medical = "medical"
    scientific = "scientific"


@dataclass(frozen=True, slots=True)
class TemperatureValue:
    """A measurement or a converted result."""

    value: float
    unit: TemperatureUnit
    precision: Optional[PrecisionContext] = None


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    temperature: TemperatureValue
    target_unit: TemperatureUnit
    precision: Optional[PrecisionContext] = None


@dataclass(frozen=True, slots=True)
class ConversionResult:
    original: TemperatureValue
    converted: TemperatureValue
    precision: PrecisionContext
    conversion_method: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class BatchConversionRequest:
    temperatures: Sequence[TemperatureValue]
    target_unit: TemperatureUnit
    precision: Optional[PrecisionContext] = None


@dataclass(frozen=True, slots=True)
class BatchConversionResult:
    """Ordered per-item results plus timing for the whole batch."""

    conversions: Tuple[ConversionResult, ...] = field(default_factory=tuple)
    total_count: int = 0
    processing_time_ms: float = 0.0
    timestamp: str = ""
