"""HTTP client for the orchard reception aggregation service."""

from __future__ import annotations

import logging
from typing import Any

import requests

LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 20
DUPLICATE_RECORD_MARKER = "Date record already exists"


class EnrichmentError(RuntimeError):
    """Raised when the reception service cannot answer a lookup."""


class ReceptionClient:
    """Looks up weekly reception totals for an orchard.

    Holds one requests.Session for the whole run; use it as a context manager
    so the session is closed on every exit path.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._session: requests.Session | None = None

    def __enter__(self) -> ReceptionClient:
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def open(self) -> None:
        """Create the session and confirm the service is reachable."""
        session = requests.Session()
        if self._api_key:
            session.headers["Authorization"] = f"Bearer {self._api_key}"
        session.headers["Accept"] = "application/json"
        self._session = session

        try:
            response = session.get(f"{self._base_url}/health", timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            self.close()
            raise EnrichmentError(f"Reception service unreachable at {self._base_url}: {exc}") from exc

        LOGGER.info("Connected to reception service at %s", self._base_url)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def fetch_receptions(self, week: int, year: int, orchard_code: int) -> dict[str, float]:
        """Return total and accepted reception quantities for one orchard week.

        A week with no receptions is reported by the service as nulls or an
        empty body; both map to zeros.
        """
        if self._session is None:
            raise EnrichmentError("ReceptionClient is not open")

        params = {"semana": week, "anio": year, "idHuerto": orchard_code}
        try:
            response = self._session.get(
                f"{self._base_url}/receptions",
                params=params,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise EnrichmentError(f"Reception lookup failed: {exc}") from exc

        if not response.ok:
            raise EnrichmentError(_error_message(response))

        body = _json_or_empty(response)
        if isinstance(body, list):
            body = body[0] if body else {}
        if not isinstance(body, dict):
            raise EnrichmentError("Unexpected reception payload shape: expected an object")

        return {
            "reception_total": _as_number(body.get("reception_total", body.get("ReceptionTotal"))),
            "reception_accepted": _as_number(body.get("reception_accepted", body.get("ReceptionAceptada"))),
        }


def _json_or_empty(response: requests.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as exc:
        raise EnrichmentError(f"Reception service returned invalid JSON: {exc}") from exc


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if isinstance(body.get(key), str) and body[key].strip():
                return body[key].strip()
    text = (response.text or "").strip()
    return text or f"Reception service returned HTTP {response.status_code}"


def _as_number(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise EnrichmentError(f"Non-numeric reception value: {value!r}") from exc
