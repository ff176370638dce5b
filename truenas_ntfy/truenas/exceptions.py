"""Exception hierarchy for the TrueNAS alert client."""

from __future__ import annotations


class FetchError(Exception):
    """Base exception for all alert retrieval errors."""


class FetchTransportError(FetchError):
    """The request never produced a response (connect error, timeout)."""


class FetchStatusError(FetchError):
    """TrueNAS answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        msg = f"TrueNAS returned HTTP {status_code}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class FetchDecodeError(FetchError):
    """The response body is not a valid alert list."""
