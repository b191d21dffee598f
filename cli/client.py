from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the conversion service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def convert(
        self,
        value: float,
        unit: str,
        target_unit: str,
        precision: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "temperature": {"value": value, "unit": unit},
            "targetUnit": target_unit,
        }
        if precision:
            body["precision"] = precision
        return self._request("POST", "/temperature/convert", json=body)

    def convert_batch(
        self,
        values: Sequence[float],
        unit: str,
        target_unit: str,
        precision: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "temperatures": [{"value": value, "unit": unit} for value in values],
            "targetUnit": target_unit,
        }
        if precision:
            body["precision"] = precision
        return self._request("POST", "/temperature/convert/batch", json=body)

    def units(self) -> Dict[str, Any]:
        return self._request("GET", "/temperature/units")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, f"{self._config.api_root}{path}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        payload = response.json()
        data = payload.get("data")
        if not isinstance(data, dict):
            raise typer.BadParameter("Unexpected response payload from the service.")
        return data

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = (data.get("error") or {}).get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
