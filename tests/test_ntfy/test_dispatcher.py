"""Tests for NtfyDispatcher — HTTP mocking, response validation, session management."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from pydantic import SecretStr

from truenas_ntfy.core.config import NtfyConfig
from truenas_ntfy.core.types import NtfyAction, NtfyMessage
from truenas_ntfy.ntfy.dispatcher import NtfyDispatcher
from truenas_ntfy.ntfy.exceptions import (
    DispatchDecodeError,
    DispatchError,
    DispatchStatusError,
    DispatchTransportError,
)

NTFY_URL = "https://ntfy.test"

_ACK = json.dumps({
    "id": "hwQ2YpKdmg",
    "time": 1700000000,
    "expires": 1700043200,
    "event": "message",
    "topic": "nas",
    "title": "Pool Degraded",
    "message": "body",
    "priority": 5,
    "tags": ["red_circle", "TrueNas"],
    "actions": [{"id": "x1", "action": "view", "label": "Admin Panel", "url": "https://nas.test", "clear": False}],
})


# ── Helpers ─────────────────────────────────────────────────────


def _msg(**kw: Any) -> NtfyMessage:
    defaults: dict[str, Any] = {
        "topic": "nas",
        "title": "Pool Degraded",
        "message": "body",
        "tags": ["red_circle", "TrueNas"],
        "priority": 5,
        "click": "https://nas.test",
        "actions": [NtfyAction(label="Admin Panel", url="https://nas.test")],
    }
    defaults.update(kw)
    return NtfyMessage(**defaults)


def _cfg(**kw: Any) -> NtfyConfig:
    defaults: dict[str, Any] = {"url": NTFY_URL, "topic": "nas"}
    defaults.update(kw)
    return NtfyConfig(**defaults)


def _mock_response(status: int = 200, text: str | bytes = _ACK) -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    body = text.encode() if isinstance(text, str) else text
    resp.read = AsyncMock(return_value=body)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _dispatcher_with(resp: Any = None, side_effect: Exception | None = None, **cfg: Any) -> tuple[NtfyDispatcher, MagicMock]:
    disp = NtfyDispatcher(_cfg(**cfg))
    mock_session = MagicMock()
    if side_effect is not None:
        mock_session.post = MagicMock(side_effect=side_effect)
    else:
        mock_session.post = MagicMock(return_value=resp)
    mock_session.closed = False
    disp._session = mock_session
    return disp, mock_session


# ── send ────────────────────────────────────────────────────────


class TestSend:
    async def test_send_success(self) -> None:
        disp, session = _dispatcher_with(_mock_response())
        ack = await disp.send(_msg())

        assert ack.id == "hwQ2YpKdmg"
        assert ack.topic == "nas"
        assert ack.actions[0].id == "x1"
        session.post.assert_called_once()
        call_args = session.post.call_args
        assert call_args[0][0] == NTFY_URL
        payload = call_args[1]["json"]
        assert payload["topic"] == "nas"
        assert payload["priority"] == 5
        assert payload["actions"] == [
            {"action": "view", "label": "Admin Panel", "url": "https://nas.test"},
        ]
        assert "attach" not in payload

    async def test_minimal_ack_accepted(self) -> None:
        ack_body = json.dumps({"id": "a", "time": 1, "topic": "nas"})
        disp, _ = _dispatcher_with(_mock_response(text=ack_body))
        ack = await disp.send(_msg())
        assert ack.id == "a"

    async def test_no_auth_header_without_token(self) -> None:
        disp, session = _dispatcher_with(_mock_response())
        await disp.send(_msg())
        headers = session.post.call_args[1]["headers"]
        assert "Authorization" not in headers
        assert headers["Content-Type"] == "application/json"

    async def test_bearer_token(self) -> None:
        disp, session = _dispatcher_with(_mock_response(), token=SecretStr("tk_abc"))
        await disp.send(_msg())
        headers = session.post.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer tk_abc"

    @pytest.mark.parametrize("status", [201, 204, 400, 403, 429, 500])
    async def test_non_200_is_status_error(self, status: int) -> None:
        disp, _ = _dispatcher_with(_mock_response(status, '{"error":"nope"}'))
        with pytest.raises(DispatchStatusError) as exc_info:
            await disp.send(_msg())
        assert exc_info.value.status_code == status

    async def test_undecodable_ack(self) -> None:
        disp, _ = _dispatcher_with(_mock_response(200, "not json"))
        with pytest.raises(DispatchDecodeError):
            await disp.send(_msg())

    async def test_ack_missing_fields(self) -> None:
        disp, _ = _dispatcher_with(_mock_response(200, '{"event": "message"}'))
        with pytest.raises(DispatchDecodeError):
            await disp.send(_msg())

    async def test_non_utf8_ack_is_decode_error(self) -> None:
        disp, _ = _dispatcher_with(_mock_response(200, b"\xff\xfe{"))
        with pytest.raises(DispatchDecodeError):
            await disp.send(_msg())

    async def test_non_utf8_error_body_keeps_status(self) -> None:
        disp, _ = _dispatcher_with(_mock_response(502, b"\xff\xfebad gateway"))
        with pytest.raises(DispatchStatusError) as exc_info:
            await disp.send(_msg())
        assert exc_info.value.status_code == 502
        assert "bad gateway" in exc_info.value.detail

    async def test_client_error_is_transport_error(self) -> None:
        disp, _ = _dispatcher_with(side_effect=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(DispatchTransportError):
            await disp.send(_msg())

    async def test_timeout_is_transport_error(self) -> None:
        disp, _ = _dispatcher_with(side_effect=asyncio.TimeoutError())
        with pytest.raises(DispatchTransportError):
            await disp.send(_msg())

    async def test_errors_share_base(self) -> None:
        disp, _ = _dispatcher_with(_mock_response(502, "bad gateway"))
        with pytest.raises(DispatchError):
            await disp.send(_msg())

    async def test_single_attempt(self) -> None:
        disp, session = _dispatcher_with(_mock_response(500, "oops"))
        with pytest.raises(DispatchStatusError):
            await disp.send(_msg())
        assert session.post.call_count == 1


# ── Session lifecycle ──────────────────────────────────────────


class TestSession:
    async def test_close_session(self) -> None:
        disp = NtfyDispatcher(_cfg())
        mock_session = AsyncMock()
        mock_session.closed = False
        disp._session = mock_session

        await disp.close()
        mock_session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        disp = NtfyDispatcher(_cfg())
        await disp.close()  # should not raise

    async def test_lazy_session_creation(self) -> None:
        disp = NtfyDispatcher(_cfg())
        assert disp._session is None
        session = disp._get_session()
        assert session is not None
        assert disp._get_session() is session
        await disp.close()
