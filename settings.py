from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_API_PREFIX_ENV = "API_PREFIX"
_API_VERSION_ENV = "API_VERSION"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"
_BATCH_MAX_ITEMS_ENV = "BATCH_MAX_ITEMS"
_SINGLE_BUDGET_ENV = "SINGLE_CONVERSION_BUDGET_MS"
_BATCH_BUDGET_ENV = "BATCH_BUDGET_MS_PER_1000"
_SLOW_REQUEST_ENV = "SLOW_REQUEST_MS"
_RATE_LIMIT_WINDOW_ENV = "RATE_LIMIT_WINDOW_MS"
_RATE_LIMIT_MAX_ENV = "RATE_LIMIT_MAX_REQUESTS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_prefix: str
    api_version: str
    cors_origins: Tuple[str, ...]
    batch_max_items: int
    single_conversion_budget_ms: float
    batch_budget_ms_per_1000: float
    slow_request_ms: float
    rate_limit_window_ms: int
    rate_limit_max_requests: int
    log_level: str

    @property
    def api_root(self) -> str:
        return f"{self.api_prefix}/{self.api_version}"


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_prefix(default: str) -> str:
    candidate = _read_str_env(_API_PREFIX_ENV, default).rstrip("/")
    if not candidate:
        return ""
    return candidate if candidate.startswith("/") else f"/{candidate}"


def _read_list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_prefix=_read_prefix("/api"),
        api_version=_read_str_env(_API_VERSION_ENV, "v1"),
        cors_origins=_read_list_env(_CORS_ORIGINS_ENV, ("http://localhost:3000",)),
        batch_max_items=_read_positive_int(_BATCH_MAX_ITEMS_ENV, 1000),
        single_conversion_budget_ms=_read_positive_float(_SINGLE_BUDGET_ENV, 1.0),
        batch_budget_ms_per_1000=_read_positive_float(_BATCH_BUDGET_ENV, 10.0),
        slow_request_ms=_read_positive_float(_SLOW_REQUEST_ENV, 1000.0),
        rate_limit_window_ms=_read_positive_int(_RATE_LIMIT_WINDOW_ENV, 900_000),
        rate_limit_max_requests=_read_positive_int(_RATE_LIMIT_MAX_ENV, 100),
        log_level=_read_log_level("INFO"),
    )
