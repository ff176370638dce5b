"""Core module — config, types, logging."""

from truenas_ntfy.core.config import (
    LoggingConfig,
    NtfyConfig,
    Settings,
    TrueNASConfig,
    load_settings,
    parse_duration,
)
from truenas_ntfy.core.exceptions import ConfigError
from truenas_ntfy.core.logging import setup_logging
from truenas_ntfy.core.types import (
    Alert,
    NtfyAction,
    NtfyMessage,
    NtfyResponse,
    TrueNASDate,
)

__all__ = [
    "Alert",
    "ConfigError",
    "LoggingConfig",
    "NtfyAction",
    "NtfyConfig",
    "NtfyMessage",
    "NtfyResponse",
    "Settings",
    "TrueNASConfig",
    "TrueNASDate",
    "load_settings",
    "parse_duration",
    "setup_logging",
]
