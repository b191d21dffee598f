"""Unit tests for the conversion engine."""

from __future__ import annotations

import math
import random

import pytest

from models.temperature import (
    BatchConversionRequest,
    ConversionRequest,
    PrecisionContext,
    TemperatureUnit,
    TemperatureValue,
)
from services.conversion import ABSOLUTE_ZERO, apply_precision, batch_convert, convert
from services.errors import (
    BatchItemFailureError,
    BelowAbsoluteZeroError,
    InvalidPrecisionError,
    InvalidUnitError,
    InvalidValueError,
)

C = TemperatureUnit.celsius
F = TemperatureUnit.fahrenheit
K = TemperatureUnit.kelvin


def _convert(value, unit, target, precision=None):
    """Helper returning the converted numeric value."""

    request = ConversionRequest(
        temperature=TemperatureValue(value=value, unit=unit),
        target_unit=target,
        precision=precision,
    )
    return convert(request).converted.value


@pytest.mark.parametrize(
    ("value", "unit", "target", "expected"),
    [
        (0, C, F, 32),
        (100, C, F, 212),
        (0, C, K, 273.15),
        (273.15, K, C, 0),
        (212, F, C, 100),
        (-40, C, F, -40),
        (0, K, F, -459.67),
        (32, F, K, 273.15),
    ],
)
def test_boundary_values(value, unit, target, expected) -> None:
    assert _convert(value, unit, target) == expected


@pytest.mark.parametrize(
    ("precision", "expected"),
    [
        (PrecisionContext.consumer, 77.22),
        (PrecisionContext.medical, 77.222),
        (PrecisionContext.industrial, 77.2222),
    ],
)
def test_precision_rounding(precision, expected) -> None:
    assert _convert(25.123456, C, F, precision) == expected


def test_scientific_precision_is_default() -> None:
    request = ConversionRequest(
        temperature=TemperatureValue(value=25.123456, unit=C),
        target_unit=F,
    )

    result = convert(request)

    assert result.precision is PrecisionContext.scientific
    assert result.converted.precision is PrecisionContext.scientific
    assert result.converted.value == 77.2222208


def test_decimal_rounding_is_half_up() -> None:
    assert apply_precision(0.125, PrecisionContext.consumer) == 0.13
    assert apply_precision(-0.125, PrecisionContext.consumer) == -0.12


@pytest.mark.parametrize("unit", list(TemperatureUnit))
@pytest.mark.parametrize("precision", [None, *PrecisionContext])
def test_identity_conversion_returns_value_unchanged(unit, precision) -> None:
    assert _convert(21.123456789, unit, unit, precision) == 21.123456789


_UNIT_PAIRS = [(unit, via) for unit in TemperatureUnit for via in TemperatureUnit if unit is not via]


@pytest.mark.parametrize(("unit", "via"), _UNIT_PAIRS)
def test_round_trip_at_scientific_precision(unit, via) -> None:
    rng = random.Random(f"{unit.value}-{via.value}")
    floor = ABSOLUTE_ZERO[unit]
    samples = [floor + rng.uniform(0, 10_000) for _ in range(500)]
    samples += [rng.uniform(1e4, 1e12) for _ in range(100)]

    for value in samples:
        there = _convert(value, unit, via)
        # Each leg rounds to 15 significant digits, so the last digit may differ.
        assert _convert(there, via, unit) == pytest.approx(value, rel=2e-14, abs=1e-9)


def test_precision_leaves_huge_values_unscaled() -> None:
    assert apply_precision(1e306, PrecisionContext.industrial) == 1e306
    assert _convert(1e305, K, C, PrecisionContext.industrial) == pytest.approx(1e305)


@pytest.mark.parametrize(
    ("value", "unit", "target"),
    [(1.7e308, C, F), (1.79e308, K, F)],
)
def test_unrepresentable_result_rejected(value, unit, target) -> None:
    with pytest.raises(InvalidValueError) as excinfo:
        _convert(value, unit, target)
    assert excinfo.value.field == "temperature.value"
    assert excinfo.value.value == value


def test_result_metadata() -> None:
    original = TemperatureValue(value=10.0, unit=C, precision=PrecisionContext.medical)
    result = convert(ConversionRequest(temperature=original, target_unit=K))

    assert result.original is original
    assert result.converted.unit is K
    assert result.conversion_method == "NIST-celsius-to-kelvin"
    assert result.timestamp.endswith("Z")


def test_plain_string_units_are_accepted() -> None:
    assert _convert(0, "celsius", "fahrenheit") == 32


@pytest.mark.parametrize(
    ("value", "unit"),
    [(-300, C), (-1, K), (-500, F), (-273.16, C), (-459.68, F)],
)
def test_below_absolute_zero_rejected(value, unit) -> None:
    for target in TemperatureUnit:
        with pytest.raises(BelowAbsoluteZeroError) as excinfo:
            _convert(value, unit, target)
        assert excinfo.value.field == "temperature.value"
        assert excinfo.value.value == value


@pytest.mark.parametrize(("value", "unit"), [(0, K), (-273.15, C), (-459.67, F)])
def test_absolute_zero_itself_is_accepted(value, unit) -> None:
    assert _convert(value, unit, K, PrecisionContext.industrial) == 0


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, "12", True, None])
def test_non_finite_or_non_numeric_values_rejected(value) -> None:
    with pytest.raises(InvalidValueError):
        _convert(value, C, F)


def test_invalid_units_rejected() -> None:
    with pytest.raises(InvalidUnitError) as source_error:
        _convert(10, "rankine", F)
    assert source_error.value.field == "temperature.unit"

    with pytest.raises(InvalidUnitError) as target_error:
        _convert(10, C, "rankine")
    assert target_error.value.field == "target_unit"


def test_invalid_precision_rejected() -> None:
    with pytest.raises(InvalidPrecisionError):
        _convert(10, C, F, "astronomical")


def test_validation_order_value_before_unit_before_bound() -> None:
    with pytest.raises(InvalidValueError):
        _convert(math.nan, "rankine", F)
    with pytest.raises(InvalidUnitError):
        _convert(-1000, C, "rankine")


def test_batch_preserves_order() -> None:
    inputs = [
        TemperatureValue(value=0, unit=C),
        TemperatureValue(value=212, unit=F),
        TemperatureValue(value=0, unit=K),
        TemperatureValue(value=37, unit=C),
    ]

    result = batch_convert(
        BatchConversionRequest(temperatures=inputs, target_unit=C, precision=PrecisionContext.consumer)
    )

    assert result.total_count == len(inputs)
    assert [item.original for item in result.conversions] == inputs
    assert [item.converted.value for item in result.conversions] == [0, 100, -273.15, 37]
    assert all(item.precision is PrecisionContext.consumer for item in result.conversions)
    assert result.processing_time_ms >= 0
    assert result.processing_time_ms == round(result.processing_time_ms, 3)


def test_batch_fails_atomically_with_item_index() -> None:
    inputs = [
        TemperatureValue(value=10, unit=C),
        TemperatureValue(value=20, unit=C),
        TemperatureValue(value=-300, unit=C),
        TemperatureValue(value=30, unit=C),
    ]

    with pytest.raises(BatchItemFailureError) as excinfo:
        batch_convert(BatchConversionRequest(temperatures=inputs, target_unit=F))

    error = excinfo.value
    assert error.index == 2
    assert isinstance(error.cause, BelowAbsoluteZeroError)
    assert error.field == "temperatures.2.value"


def test_empty_batch_returns_empty_result() -> None:
    result = batch_convert(BatchConversionRequest(temperatures=[], target_unit=K))

    assert result.conversions == ()
    assert result.total_count == 0
