from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_UNIT_SYMBOLS = {"celsius": "°C", "fahrenheit": "°F", "kelvin": "K"}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_temperature(payload: Dict[str, Any]) -> str:
    unit = payload.get("unit")
    return f"{payload.get('value')} {_UNIT_SYMBOLS.get(unit, unit)}"


def render_conversion(payload: Dict[str, Any]) -> None:
    echo_heading("Conversion")
    echo_key_values(
        [
            ("original", format_temperature(payload.get("original") or {})),
            ("converted", format_temperature(payload.get("converted") or {})),
            ("precision", payload.get("precision")),
            ("method", payload.get("conversionMethod")),
            ("timestamp", payload.get("timestamp")),
        ]
    )


def render_batch(payload: Dict[str, Any]) -> None:
    echo_heading("Batch Conversion")
    echo_key_values(
        [
            ("total_count", payload.get("totalCount")),
            ("processing_time_ms", payload.get("processingTimeMs")),
        ]
    )
    conversions = payload.get("conversions") or []
    typer.echo()
    for index, item in enumerate(conversions):
        typer.echo(
            f"  [{index}] {format_temperature(item.get('original') or {})}"
            f" -> {format_temperature(item.get('converted') or {})}"
        )


def render_units(payload: Dict[str, Any]) -> None:
    echo_heading("Temperature Units")
    for unit in payload.get("temperatureUnits") or []:
        typer.echo(f"  - {unit}")
    typer.echo()
    echo_heading("Precision Contexts")
    details = payload.get("precisionDetails") or {}
    for context in payload.get("precisionContexts") or []:
        info = details.get(context) or {}
        if info.get("decimalPlaces") is not None:
            rule = f"{info['decimalPlaces']} decimal places"
        else:
            rule = f"{info.get('significantFigures')} significant figures"
        typer.echo(f"  - {context}: {rule} ({info.get('description', '')})")


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Service Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("version", payload.get("version")),
            ("uptime_seconds", payload.get("uptimeSeconds")),
        ]
    )
    for name, state in (payload.get("services") or {}).items():
        typer.echo(f"  - {name}: {state}")
