"""Pydantic settings loaded from YAML configuration and the environment."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr, ValidationError, field_validator

from truenas_ntfy.core.exceptions import ConfigError

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Environment variable → dotted settings path.
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "TRUENASURL": ("truenas", "url"),
    "APIKEY": ("truenas", "api_key"),
    "NTFYURL": ("ntfy", "url"),
    "TOPIC": ("ntfy", "topic"),
    "NTFYTOKEN": ("ntfy", "token"),
    "INTERVAL": ("lookback",),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
}

# Go-style duration units, expressed in seconds.
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(raw: str) -> timedelta:
    """Parse a Go-style duration string such as ``"24h"`` or ``"1h30m"``.

    A leading sign is accepted. ``"0"`` is the only unit-less value allowed.

    Raises:
        ConfigError: If the string is empty or not a valid duration.
    """
    text = raw.strip()
    if not text:
        raise ConfigError("duration is empty")

    sign = 1.0
    body = text
    if body[0] in "+-":
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]

    if body == "0":
        return timedelta(0)

    total = 0.0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise ConfigError(f"invalid duration {raw!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0:
        raise ConfigError(f"invalid duration {raw!r}")
    return timedelta(seconds=sign * total)


class TrueNASConfig(BaseModel):
    """TrueNAS alert API configuration."""

    url: str = ""
    api_key: SecretStr = SecretStr("")
    timeout_secs: float = 10.0
    verify_tls: bool = True

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class NtfyConfig(BaseModel):
    """ntfy publishing configuration."""

    url: str = ""
    topic: str = ""
    token: SecretStr = SecretStr("")
    domain_tag: str = "TrueNas"
    timeout_secs: float = 10.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    truenas: TrueNASConfig = TrueNASConfig()
    ntfy: NtfyConfig = NtfyConfig()
    lookback: timedelta = timedelta(hours=24)
    logging: LoggingConfig = LoggingConfig()

    @field_validator("lookback", mode="before")
    @classmethod
    def _parse_lookback(cls, v: object) -> object:
        if isinstance(v, str):
            return parse_duration(v)
        return v

    def require_complete(self) -> None:
        """Raise ConfigError if any value needed for a run is missing."""
        missing: list[str] = []
        if not self.truenas.url:
            missing.append("truenas.url (TRUENASURL)")
        if not self.truenas.api_key.get_secret_value():
            missing.append("truenas.api_key (APIKEY)")
        if not self.ntfy.url:
            missing.append("ntfy.url (NTFYURL)")
        if not self.ntfy.topic:
            missing.append("ntfy.topic (TOPIC)")
        if missing:
            raise ConfigError("missing required settings: " + ", ".join(missing))


def _apply_env(data: dict[str, Any], environ: Mapping[str, str]) -> None:
    for var, path in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        node = data
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from an optional YAML file plus environment overrides.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml; a
            missing file is not an error.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Validated Settings instance with every required value present.

    Raises:
        ConfigError: On unreadable YAML, invalid values, a malformed
            look-back duration, or missing required settings.
    """
    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except OSError as exc:
            raise ConfigError(f"cannot read {config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {config_path}: {exc}") from exc
        if isinstance(raw, dict):
            data = raw

    _apply_env(data, os.environ if environ is None else environ)

    # A malformed duration surfaces as ConfigError straight from the validator.
    try:
        settings = Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    settings.require_complete()
    return settings
