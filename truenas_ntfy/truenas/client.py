"""TrueNAS alert client — fetches the active alert list and applies the look-back window."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from types import TracebackType

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from truenas_ntfy.core.config import TrueNASConfig
from truenas_ntfy.core.types import Alert
from truenas_ntfy.truenas.exceptions import (
    FetchDecodeError,
    FetchStatusError,
    FetchTransportError,
)

logger = structlog.stdlib.get_logger()

ALERT_LIST_PATH = "/api/v2.0/alert/list"

_ALERT_LIST = TypeAdapter(list[Alert])


def compute_cutoff(now: datetime, lookback: timedelta) -> int:
    """Return ``now - lookback`` as epoch milliseconds."""
    return int((now - lookback).timestamp() * 1000)


def is_in_scope(alert: Alert, cutoff_ms: int) -> bool:
    """An alert is in scope once it has existed for at least the look-back window."""
    return alert.created_ms <= cutoff_ms


def filter_in_scope(alerts: Iterable[Alert], cutoff_ms: int) -> list[Alert]:
    """Return a new list of in-scope alerts, preserving order."""
    return [a for a in alerts if is_in_scope(a, cutoff_ms)]


def parse_alert_list(body: object) -> list[Alert]:
    """Validate a decoded JSON body as a list of alerts.

    Raises:
        FetchDecodeError: If the body is not an array of alert objects.
    """
    if not isinstance(body, list):
        raise FetchDecodeError(
            f"expected a JSON array of alerts, got {type(body).__name__}"
        )
    try:
        return _ALERT_LIST.validate_python(body)
    except ValidationError as exc:
        raise FetchDecodeError(f"malformed alert record: {exc}") from exc


class TrueNASClient:
    """Async client for the TrueNAS v2.0 REST alert endpoint.

    Usage::

        async with TrueNASClient(settings.truenas) as client:
            alerts = await client.fetch_alerts(cutoff_ms)
    """

    def __init__(self, config: TrueNASConfig) -> None:
        self._config = config
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._config.timeout_secs),
            verify=self._config.verify_tls,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._config.api_key.get_secret_value()}",
            },
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> TrueNASClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def list_alerts(self) -> list[Alert]:
        """Fetch every active alert, unfiltered.

        Raises:
            FetchTransportError: Connection failure or timeout.
            FetchStatusError: Non-2xx response.
            FetchDecodeError: Body is not a valid alert list.
        """
        if self._http is None:
            raise FetchTransportError("HTTP client not connected")

        url = f"{self._config.url}{ALERT_LIST_PATH}"
        try:
            response = await self._http.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchStatusError(
                exc.response.status_code, exc.response.text[:200]
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchTransportError(f"TrueNAS request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchDecodeError("TrueNAS returned invalid JSON") from exc

        return parse_alert_list(body)

    async def fetch_alerts(self, cutoff_ms: int) -> list[Alert]:
        """Fetch the alert list and keep only alerts created at or before *cutoff_ms*."""
        alerts = await self.list_alerts()
        in_scope = filter_in_scope(alerts, cutoff_ms)
        logger.debug(
            "truenas_alerts_filtered",
            total=len(alerts),
            in_scope=len(in_scope),
            cutoff_ms=cutoff_ms,
        )
        return in_scope
