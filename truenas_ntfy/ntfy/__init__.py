"""ntfy side — severity mapping, message composition, and delivery."""

from truenas_ntfy.ntfy.composer import (
    compose,
    extract_title,
    format_timestamp,
    normalise_markup,
    render_body,
)
from truenas_ntfy.ntfy.dispatcher import NtfyDispatcher
from truenas_ntfy.ntfy.exceptions import (
    DispatchDecodeError,
    DispatchError,
    DispatchStatusError,
    DispatchTransportError,
)
from truenas_ntfy.ntfy.severity import is_known_level, severity_for_level

__all__ = [
    "DispatchDecodeError",
    "DispatchError",
    "DispatchStatusError",
    "DispatchTransportError",
    "NtfyDispatcher",
    "compose",
    "extract_title",
    "format_timestamp",
    "is_known_level",
    "normalise_markup",
    "render_body",
    "severity_for_level",
]
