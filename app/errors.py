"""Exception handlers translating failures into problem-details responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.schemas import ErrorResponse, ProblemDetail, ResponseMeta
from services.conversion import utc_timestamp
from services.errors import (
    BatchItemFailureError,
    BelowAbsoluteZeroError,
    ConversionError,
    InvalidPrecisionError,
    InvalidUnitError,
    InvalidValueError,
)
from settings import get_settings

logger = logging.getLogger(__name__)

_CONVERSION_STATUS: Dict[Type[ConversionError], int] = {
    InvalidValueError: status.HTTP_400_BAD_REQUEST,
    InvalidUnitError: status.HTTP_400_BAD_REQUEST,
    InvalidPrecisionError: status.HTTP_400_BAD_REQUEST,
    BelowAbsoluteZeroError: 422,
}

_CONVERSION_TITLES: Dict[Type[ConversionError], str] = {
    InvalidValueError: "Invalid Temperature Value",
    InvalidUnitError: "Invalid Temperature Unit",
    InvalidPrecisionError: "Invalid Precision Context",
    BelowAbsoluteZeroError: "Temperature Below Absolute Zero",
}


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get(
        "x-request-id", "unknown"
    )


def build_meta(request: Request) -> ResponseMeta:
    return ResponseMeta(
        timestamp=utc_timestamp(),
        version=get_settings().api_version,
        request_id=request_id_of(request),
    )


def problem_response(
    request: Request,
    *,
    status_code: int,
    type_: str,
    title: str,
    detail: str,
    field: Optional[str] = None,
    value: Any = None,
    index: Optional[int] = None,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> JSONResponse:
    meta = build_meta(request)
    body = ErrorResponse(
        error=ProblemDetail(
            type=type_,
            title=title,
            status=status_code,
            detail=detail,
            instance=request.url.path,
            timestamp=meta.timestamp,
            field=field,
            value=value,
            index=index,
            errors=errors or [],
        ),
        meta=meta,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected fault and answer with an opaque 500 problem body."""
    logger.error(
        "Unhandled exception on %s",
        request.url.path,
        exc_info=exc,
        extra={"request_id": request_id_of(request)},
    )
    return problem_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        type_="/errors/internal-server-error",
        title="Internal Server Error",
        detail="An unexpected error occurred. Please try again later.",
    )


def conversion_status(exc: ConversionError) -> int:
    if isinstance(exc, BatchItemFailureError):
        return conversion_status(exc.cause)
    for error_type, status_code in _CONVERSION_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 422


def register_error_handlers(app: FastAPI) -> None:
    """Register conversion, validation, routing and catch-all handlers."""

    @app.exception_handler(ConversionError)
    async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
        root = exc.cause if isinstance(exc, BatchItemFailureError) else exc
        index = exc.index if isinstance(exc, BatchItemFailureError) else None
        status_code = conversion_status(exc)
        logger.info(
            "Conversion rejected: %s",
            exc.message,
            extra={
                "request_id": request_id_of(request),
                "error_code": root.code,
                "field": exc.field,
                "index": index,
            },
        )
        return problem_response(
            request,
            status_code=status_code,
            type_=f"/errors/{root.code.lower().replace('_', '-')}",
            title=_CONVERSION_TITLES.get(type(root), "Temperature Conversion Failed"),
            detail=exc.message,
            field=exc.field,
            value=exc.value,
            index=index,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        logger.warning(
            "Request validation failed on %s",
            request.url.path,
            extra={"request_id": request_id_of(request), "error_code": "VALIDATION_ERROR"},
        )
        summary = ", ".join(f"{item['field']}: {item['message']}" for item in details)
        return problem_response(
            request,
            status_code=status.HTTP_400_BAD_REQUEST,
            type_="/errors/validation-failed",
            title="Request Validation Failed",
            detail=f"Validation failed: {summary}",
            errors=details,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return problem_response(
                request,
                status_code=exc.status_code,
                type_="/errors/not-found",
                title="Resource Not Found",
                detail=f"The requested resource '{request.url.path}' was not found on this server.",
            )
        return problem_response(
            request,
            status_code=exc.status_code,
            type_="/errors/http-error",
            title=str(exc.detail),
            detail=str(exc.detail),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return internal_error_response(request, exc)
