"""AlertBridge — orchestrates the fetch→compose→dispatch pipeline for one run."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from types import TracebackType

import structlog
from pydantic import BaseModel, Field

from truenas_ntfy.core.config import Settings
from truenas_ntfy.core.types import Alert
from truenas_ntfy.ntfy.composer import compose, extract_title
from truenas_ntfy.ntfy.dispatcher import NtfyDispatcher
from truenas_ntfy.ntfy.exceptions import DispatchError
from truenas_ntfy.truenas.client import TrueNASClient, compute_cutoff

logger = structlog.stdlib.get_logger()


class RunResult(BaseModel):
    """Outcome of one bridge run."""

    cutoff_ms: int
    fetched: int = 0
    sent: int = 0
    failed: int = 0
    failed_alert_ids: list[str] = Field(default_factory=list)


class AlertBridge:
    """Runs one pass of TrueNAS alerts through to ntfy.

    A fetch failure propagates and ends the run. A failure while composing
    or dispatching one alert is logged and the remaining alerts are still
    processed. Alerts are handled one at a time in the order TrueNAS
    returned them.

    Usage::

        async with AlertBridge(settings) as bridge:
            result = await bridge.run()
    """

    def __init__(
        self,
        settings: Settings,
        client: TrueNASClient | None = None,
        dispatcher: NtfyDispatcher | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or TrueNASClient(settings.truenas)
        self._dispatcher = dispatcher or NtfyDispatcher(settings.ntfy)
        self._tz = tz

    async def __aenter__(self) -> AlertBridge:
        await self._client.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()
        await self._dispatcher.close()

    async def run(self, now: datetime | None = None) -> RunResult:
        """Fetch in-scope alerts and publish each one.

        Args:
            now: Reference time for the look-back cutoff. Defaults to the
                current UTC time.

        Raises:
            FetchError: TrueNAS could not be queried; nothing was sent.
        """
        now = now or datetime.now(timezone.utc)
        cutoff_ms = compute_cutoff(now, self._settings.lookback)

        alerts = await self._client.fetch_alerts(cutoff_ms)
        result = RunResult(cutoff_ms=cutoff_ms, fetched=len(alerts))
        logger.info("alerts_fetched", count=len(alerts), cutoff_ms=cutoff_ms)

        for alert in alerts:
            if await self._process(alert):
                result.sent += 1
            else:
                result.failed += 1
                result.failed_alert_ids.append(alert.ident)

        logger.info(
            "bridge_run_complete",
            fetched=result.fetched,
            sent=result.sent,
            failed=result.failed,
        )
        return result

    async def _process(self, alert: Alert) -> bool:
        try:
            msg = compose(
                alert,
                self._settings.truenas.url,
                topic=self._settings.ntfy.topic,
                domain_tag=self._settings.ntfy.domain_tag,
                tz=self._tz,
            )
            ack = await self._dispatcher.send(msg)
        except DispatchError as exc:
            logger.error(
                "ntfy_dispatch_failed",
                alert_id=alert.ident,
                title=extract_title(alert.formatted),
                level=alert.level,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
        except Exception:
            logger.exception(
                "alert_processing_error",
                alert_id=alert.ident,
                title=extract_title(alert.formatted),
                level=alert.level,
            )
            return False

        logger.info(
            "alert_dispatched",
            alert_id=alert.ident,
            title=msg.title,
            priority=msg.priority,
            ntfy_id=ack.id,
        )
        return True


async def run_once(settings: Settings, now: datetime | None = None) -> RunResult:
    """Build a bridge from *settings*, run it once, and release its clients."""
    async with AlertBridge(settings) as bridge:
        return await bridge.run(now)
