"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status

from app.errors import build_meta, problem_response
from app.schemas import (
    ApiResponse,
    BatchConversionRequestSchema,
    BatchConversionResultSchema,
    ConversionPair,
    ConversionRequestSchema,
    ConversionResultSchema,
    ErrorResponse,
    HealthStatus,
    PrecisionDetail,
    SupportedUnits,
)
from models.temperature import PrecisionContext, TemperatureUnit
from services import conversion
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}

_PRECISION_DESCRIPTIONS = {
    PrecisionContext.consumer: "Consumer applications",
    PrecisionContext.industrial: "Industrial monitoring",
    PrecisionContext.medical: "Medical devices",
    PrecisionContext.scientific: "Scientific research",
}


def get_app_settings() -> Settings:
    return get_settings()


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 3)


@router.post(
    "/temperature/convert",
    response_model=ApiResponse[ConversionResultSchema],
    responses=_ERROR_RESPONSES,
    summary="Convert a single temperature reading.",
)
def convert_temperature(
    payload: ConversionRequestSchema,
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[ConversionResultSchema]:
    start_time = time.perf_counter()
    result = conversion.convert(payload.to_domain())
    processing_ms = _elapsed_ms(start_time)

    if processing_ms > settings.single_conversion_budget_ms:
        logger.warning(
            "Single conversion exceeded %sms budget",
            settings.single_conversion_budget_ms,
            extra={"request_id": request.state.request_id, "processing_ms": processing_ms},
        )
    return ApiResponse[ConversionResultSchema](
        data=ConversionResultSchema.from_domain(result),
        meta=build_meta(request),
    )


@router.post(
    "/temperature/convert/batch",
    response_model=ApiResponse[BatchConversionResultSchema],
    responses=_ERROR_RESPONSES,
    summary="Convert many readings to one target unit.",
)
def convert_temperature_batch(
    payload: BatchConversionRequestSchema,
    request: Request,
    settings: Settings = Depends(get_app_settings),
):
    item_count = len(payload.temperatures)
    if item_count > settings.batch_max_items:
        return problem_response(
            request,
            status_code=status.HTTP_400_BAD_REQUEST,
            type_="/errors/validation-failed",
            title="Request Validation Failed",
            detail=(
                f"Validation failed: temperatures: Maximum {settings.batch_max_items} "
                "temperature values allowed per batch"
            ),
            field="temperatures",
        )

    start_time = time.perf_counter()
    result = conversion.batch_convert(payload.to_domain())
    processing_ms = _elapsed_ms(start_time)

    budget_ms = item_count / 1000 * settings.batch_budget_ms_per_1000
    if processing_ms > budget_ms:
        logger.warning(
            "Batch conversion exceeded %.3fms budget",
            budget_ms,
            extra={
                "request_id": request.state.request_id,
                "processing_ms": processing_ms,
                "item_count": item_count,
            },
        )
    return ApiResponse[BatchConversionResultSchema](
        data=BatchConversionResultSchema.from_domain(result),
        meta=build_meta(request),
    )


@router.get(
    "/temperature/units",
    response_model=ApiResponse[SupportedUnits],
    response_model_exclude_none=True,
    summary="List supported units and precision contexts.",
)
async def supported_units(request: Request) -> ApiResponse[SupportedUnits]:
    units = list(TemperatureUnit)
    details = {}
    for context in PrecisionContext:
        places = conversion.DECIMAL_PLACES.get(context)
        details[context.value] = PrecisionDetail(
            decimal_places=places,
            significant_figures=None if places is not None else conversion.SIGNIFICANT_DIGITS,
            description=_PRECISION_DESCRIPTIONS[context],
        )
    return ApiResponse[SupportedUnits](
        data=SupportedUnits(
            temperature_units=units,
            precision_contexts=list(PrecisionContext),
            conversion_pairs=[
                ConversionPair(from_unit=source, to_unit=target)
                for source in units
                for target in units
                if source is not target
            ],
            precision_details=details,
        ),
        meta=build_meta(request),
    )


@router.get(
    "/health",
    response_model=ApiResponse[HealthStatus],
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse[HealthStatus]:
    meta = build_meta(request)
    return ApiResponse[HealthStatus](
        data=HealthStatus(
            status="healthy",
            timestamp=meta.timestamp,
            version=settings.api_version,
            services={"temperatureConversion": "operational"},
            uptime_seconds=round(time.monotonic() - _STARTED_AT, 3),
        ),
        meta=meta,
    )


root_router = APIRouter()


@root_router.get(
    "/",
    summary="Service description and endpoint map.",
    status_code=status.HTTP_200_OK,
)
async def root(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    base = settings.api_root
    return {
        "name": "Temperature Conversion API",
        "version": "1.0.0",
        "description": "High-precision temperature conversion API for IoT applications",
        "endpoints": {
            "health": f"{base}/health",
            "convert": f"{base}/temperature/convert",
            "batchConvert": f"{base}/temperature/convert/batch",
            "units": f"{base}/temperature/units",
        },
        "documentation": "/docs",
        "timestamp": conversion.utc_timestamp(),
    }
