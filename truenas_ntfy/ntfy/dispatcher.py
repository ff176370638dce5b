"""ntfy dispatcher — publishes one composed message per call via the JSON API."""

from __future__ import annotations

import asyncio

import aiohttp
import structlog
from pydantic import ValidationError

from truenas_ntfy.core.config import NtfyConfig
from truenas_ntfy.core.types import NtfyMessage, NtfyResponse
from truenas_ntfy.ntfy.exceptions import (
    DispatchDecodeError,
    DispatchStatusError,
    DispatchTransportError,
)

logger = structlog.get_logger(__name__)


class NtfyDispatcher:
    """Delivers messages to an ntfy server.

    One attempt per ``send``: no retry, no queueing. Success is exactly
    HTTP 200 with a decodable acknowledgement.
    """

    def __init__(self, config: NtfyConfig) -> None:
        self._url = config.url
        self._token = config.token.get_secret_value()
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def send(self, msg: NtfyMessage) -> NtfyResponse:
        """Publish *msg* and return ntfy's acknowledgement.

        Raises:
            DispatchTransportError: Connection failure or timeout.
            DispatchStatusError: Any status other than 200.
            DispatchDecodeError: 200 with an undecodable body.
        """
        try:
            session = self._get_session()
            async with session.post(
                self._url, json=msg.to_payload(), headers=self._headers()
            ) as resp:
                status = resp.status
                raw = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise DispatchTransportError(f"ntfy request failed: {exc!r}") from exc

        if status != 200:
            raise DispatchStatusError(status, raw[:200].decode("utf-8", errors="replace"))

        try:
            ack = NtfyResponse.model_validate_json(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValidationError) as exc:
            raise DispatchDecodeError(f"unreadable ntfy acknowledgement: {raw[:200]!r}") from exc

        logger.debug("ntfy_message_published", ntfy_id=ack.id, topic=ack.topic)
        return ack

    async def close(self) -> None:
        """Release the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
