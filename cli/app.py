from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_batch, render_conversion, render_health, render_units
from models.temperature import PrecisionContext, TemperatureUnit


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the temperature conversion service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Lets negative readings such as -40 through as arguments.
_NUMERIC_ARGS = {"ignore_unknown_options": True}


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


def _precision_value(precision: Optional[PrecisionContext]) -> Optional[str]:
    return precision.value if precision is not None else None


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("convert", context_settings=_NUMERIC_ARGS)
def convert_command(
    ctx: typer.Context,
    value: float = typer.Argument(..., help="Temperature reading to convert."),
    unit: TemperatureUnit = typer.Argument(..., help="Unit of the reading."),
    target_unit: TemperatureUnit = typer.Argument(..., help="Unit to convert to."),
    precision: Optional[PrecisionContext] = typer.Option(
        None,
        "--precision",
        "-p",
        help="Rounding policy (scientific when omitted).",
    ),
) -> None:
    """Convert a single temperature reading."""
    state = _get_state(ctx)
    payload = state.client.convert(
        value, unit.value, target_unit.value, _precision_value(precision)
    )
    render_conversion(payload)


@app.command("batch", context_settings=_NUMERIC_ARGS)
def batch_command(
    ctx: typer.Context,
    target_unit: TemperatureUnit = typer.Argument(..., help="Unit to convert to."),
    values: List[float] = typer.Argument(..., help="Readings sharing the source unit."),
    unit: TemperatureUnit = typer.Option(
        ...,
        "--unit",
        "-u",
        help="Unit of every reading.",
    ),
    precision: Optional[PrecisionContext] = typer.Option(
        None,
        "--precision",
        "-p",
        help="Rounding policy (scientific when omitted).",
    ),
) -> None:
    """Convert several readings in one request."""
    state = _get_state(ctx)
    payload = state.client.convert_batch(
        values, unit.value, target_unit.value, _precision_value(precision)
    )
    render_batch(payload)


@app.command("units")
def units_command(ctx: typer.Context) -> None:
    """List supported units and precision contexts."""
    state = _get_state(ctx)
    render_units(state.client.units())


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Show service health."""
    state = _get_state(ctx)
    render_health(state.client.health())
