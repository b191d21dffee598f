"""Temperature conversion engine.

Every conversion is routed through Kelvin: each unit defines one formula into
Kelvin and one out of it. Inputs are validated before any arithmetic, and
rounding is applied exactly once to the converted value.
"""

from __future__ import annotations

import math
import numbers
import time
from datetime import datetime, timezone
from typing import Any, Optional

from models.temperature import (
    BatchConversionRequest,
    BatchConversionResult,
    ConversionRequest,
    ConversionResult,
    PrecisionContext,
    TemperatureUnit,
    TemperatureValue,
)
from services.errors import (
    BatchItemFailureError,
    BelowAbsoluteZeroError,
    ConversionError,
    InvalidPrecisionError,
    InvalidUnitError,
    InvalidValueError,
)

ABSOLUTE_ZERO = {
    TemperatureUnit.kelvin: 0.0,
    TemperatureUnit.celsius: -273.15,
    TemperatureUnit.fahrenheit: -459.67,
}

_UNIT_SYMBOLS = {
    TemperatureUnit.kelvin: "K",
    TemperatureUnit.celsius: "°C",
    TemperatureUnit.fahrenheit: "°F",
}

DECIMAL_PLACES = {
    PrecisionContext.consumer: 2,
    PrecisionContext.medical: 3,
    PrecisionContext.industrial: 4,
}
SIGNIFICANT_DIGITS = 15
DEFAULT_PRECISION = PrecisionContext.scientific


def convert(request: ConversionRequest) -> ConversionResult:
    """Convert a single temperature, validating it first."""
    temperature = request.temperature
    value = _validate_value(temperature.value)
    source = _coerce_unit(temperature.unit, "temperature.unit")
    target = _coerce_unit(request.target_unit, "target_unit")
    precision = _coerce_precision(request.precision)
    _validate_absolute_zero(value, source)

    if source is target:
        converted_value = temperature.value
    else:
        kelvin = to_kelvin(value, source)
        converted_value = apply_precision(from_kelvin(kelvin, target), precision)
        if not math.isfinite(converted_value):
            raise InvalidValueError(
                f"Converted temperature is outside the representable range for {target.value}",
                field="temperature.value",
                value=value,
            )

    return ConversionResult(
        original=temperature,
        converted=TemperatureValue(value=converted_value, unit=target, precision=precision),
        precision=precision,
        conversion_method=f"NIST-{source.value}-to-{target.value}",
        timestamp=utc_timestamp(),
    )


def batch_convert(request: BatchConversionRequest) -> BatchConversionResult:
    """Convert every item with the shared target unit and precision.

    The first failing item aborts the batch with ``BatchItemFailureError``.
    An empty batch produces an empty result.
    """
    start_time = time.perf_counter()
    conversions: list[ConversionResult] = []
    for index, temperature in enumerate(request.temperatures):
        item_request = ConversionRequest(
            temperature=temperature,
            target_unit=request.target_unit,
            precision=request.precision,
        )
        try:
            conversions.append(convert(item_request))
        except ConversionError as exc:
            raise BatchItemFailureError(index, exc) from exc

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    return BatchConversionResult(
        conversions=tuple(conversions),
        total_count=len(conversions),
        processing_time_ms=round(elapsed_ms, 3),
        timestamp=utc_timestamp(),
    )


def to_kelvin(value: float, unit: TemperatureUnit) -> float:
    if unit is TemperatureUnit.kelvin:
        return value
    if unit is TemperatureUnit.celsius:
        return value + 273.15
    if unit is TemperatureUnit.fahrenheit:
        return (value + 459.67) * (5 / 9)
    raise ValueError(f"Unsupported temperature unit: {unit!r}")


def from_kelvin(kelvin: float, unit: TemperatureUnit) -> float:
    if unit is TemperatureUnit.kelvin:
        return kelvin
    if unit is TemperatureUnit.celsius:
        return kelvin - 273.15
    if unit is TemperatureUnit.fahrenheit:
        return kelvin * (9 / 5) - 459.67
    raise ValueError(f"Unsupported temperature unit: {unit!r}")


def apply_precision(value: float, precision: PrecisionContext) -> float:
    """Round ``value`` according to the precision context."""
    places = DECIMAL_PLACES.get(precision)
    if places is None:
        return float(f"{value:.{SIGNIFICANT_DIGITS}g}")
    factor = 10**places
    scaled = value * factor
    if not math.isfinite(scaled):
        # Too large to carry any fractional digits.
        return value
    # Half-up on the scaled value; round() would be half-even.
    return math.floor(scaled + 0.5) / factor


def _validate_value(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidValueError(
            "Temperature value must be a valid finite number",
            field="temperature.value",
            value=value,
        )
    if not math.isfinite(value):
        raise InvalidValueError(
            "Temperature value must be a valid finite number",
            field="temperature.value",
            value=value,
        )
    return float(value)


def _coerce_unit(unit: Any, field: str) -> TemperatureUnit:
    if isinstance(unit, TemperatureUnit):
        return unit
    try:
        return TemperatureUnit(unit)
    except ValueError:
        raise InvalidUnitError(
            f"Invalid temperature unit: {unit}", field=field, value=unit
        ) from None


def _coerce_precision(precision: Any) -> PrecisionContext:
    if precision is None:
        return DEFAULT_PRECISION
    if isinstance(precision, PrecisionContext):
        return precision
    try:
        return PrecisionContext(precision)
    except ValueError:
        raise InvalidPrecisionError(
            f"Invalid precision context: {precision}", field="precision", value=precision
        ) from None


def _validate_absolute_zero(value: float, unit: TemperatureUnit) -> None:
    floor = ABSOLUTE_ZERO[unit]
    if value < floor:
        raise BelowAbsoluteZeroError(
            f"Temperature cannot be below absolute zero ({floor:g}{_UNIT_SYMBOLS[unit]})",
            field="temperature.value",
            value=value,
        )


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
