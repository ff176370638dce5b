"""Exception hierarchy for ntfy delivery."""

from __future__ import annotations


class DispatchError(Exception):
    """Base exception for all notification delivery errors."""


class DispatchTransportError(DispatchError):
    """The POST never produced a response (connect error, timeout)."""


class DispatchStatusError(DispatchError):
    """ntfy answered with something other than HTTP 200."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        msg = f"ntfy returned HTTP {status_code}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class DispatchDecodeError(DispatchError):
    """ntfy answered 200 but the acknowledgement body could not be decoded."""
