"""Exceptions raised while building the process configuration."""

from __future__ import annotations


class ConfigError(Exception):
    """Configuration is missing a required value or holds a malformed one."""
