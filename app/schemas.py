"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.temperature import (
    BatchConversionRequest,
    BatchConversionResult,
    ConversionRequest,
    ConversionResult,
    PrecisionContext,
    TemperatureUnit,
    TemperatureValue,
)

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemperatureValueSchema(ApiModel):
    value: float = Field(
        ..., strict=True, allow_inf_nan=False, description="Temperature reading."
    )
    unit: TemperatureUnit
    precision: Optional[PrecisionContext] = None

    def to_domain(self) -> TemperatureValue:
        return TemperatureValue(value=self.value, unit=self.unit, precision=self.precision)

    @classmethod
    def from_domain(cls, value: TemperatureValue) -> "TemperatureValueSchema":
        return cls(value=value.value, unit=value.unit, precision=value.precision)


class ConversionRequestSchema(ApiModel):
    """Body of a single conversion call."""

    temperature: TemperatureValueSchema
    target_unit: TemperatureUnit
    precision: Optional[PrecisionContext] = Field(
        default=None, description="Rounding policy; scientific when omitted."
    )

    def to_domain(self) -> ConversionRequest:
        return ConversionRequest(
            temperature=self.temperature.to_domain(),
            target_unit=self.target_unit,
            precision=self.precision,
        )


class BatchConversionRequestSchema(ApiModel):
    """Body of a batch conversion call; the size bound is checked by the route."""

    temperatures: List[TemperatureValueSchema] = Field(..., min_length=1)
    target_unit: TemperatureUnit
    precision: Optional[PrecisionContext] = None

    def to_domain(self) -> BatchConversionRequest:
        return BatchConversionRequest(
            temperatures=[item.to_domain() for item in self.temperatures],
            target_unit=self.target_unit,
            precision=self.precision,
        )


class ConversionResultSchema(ApiModel):
    original: TemperatureValueSchema
    converted: TemperatureValueSchema
    precision: PrecisionContext
    timestamp: str
    conversion_method: str

    @classmethod
    def from_domain(cls, result: ConversionResult) -> "ConversionResultSchema":
        return cls(
            original=TemperatureValueSchema.from_domain(result.original),
            converted=TemperatureValueSchema.from_domain(result.converted),
            precision=result.precision,
            timestamp=result.timestamp,
            conversion_method=result.conversion_method,
        )


class BatchConversionResultSchema(ApiModel):
    conversions: List[ConversionResultSchema]
    total_count: int = Field(..., ge=0)
    processing_time_ms: float = Field(..., ge=0, description="Engine time for the batch.")
    timestamp: str

    @classmethod
    def from_domain(cls, result: BatchConversionResult) -> "BatchConversionResultSchema":
        return cls(
            conversions=[ConversionResultSchema.from_domain(item) for item in result.conversions],
            total_count=result.total_count,
            processing_time_ms=result.processing_time_ms,
            timestamp=result.timestamp,
        )


class ResponseMeta(ApiModel):
    timestamp: str
    version: str
    request_id: str


class ApiResponse(ApiModel, Generic[DataT]):
    """Envelope wrapping every successful payload."""

    data: DataT
    meta: ResponseMeta


class ProblemDetail(ApiModel):
    """Structured error body returned for every failure."""

    type: str
    title: str
    status: int
    detail: str
    instance: Optional[str] = None
    timestamp: str
    field: Optional[str] = None
    value: Optional[Any] = None
    index: Optional[int] = None
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(ApiModel):
    error: ProblemDetail
    meta: ResponseMeta


class HealthStatus(ApiModel):
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]
    uptime_seconds: float


class PrecisionDetail(ApiModel):
    decimal_places: Optional[int] = None
    significant_figures: Optional[int] = None
    description: str


class ConversionPair(BaseModel):
    # "from" is a keyword, so this model keeps explicit aliases.
    model_config = ConfigDict(populate_by_name=True)

    from_unit: TemperatureUnit = Field(..., alias="from")
    to_unit: TemperatureUnit = Field(..., alias="to")


class SupportedUnits(ApiModel):
    temperature_units: List[TemperatureUnit]
    precision_contexts: List[PrecisionContext]
    conversion_pairs: List[ConversionPair]
    precision_details: Dict[str, PrecisionDetail]
