"""TrueNAS alert level → ntfy emoji tag and priority."""

from __future__ import annotations

# Levels are the canonical uppercase TrueNAS tokens; lookup is case-sensitive.
_LEVELS: dict[str, tuple[str, int]] = {
    "INFO": ("large_blue_circle", 1),
    "NOTICE": ("purple_circle", 2),
    "WARNING": ("yellow_circle", 3),
    "ERROR": ("orange_circle", 4),
    "ALERT": ("orange_circle", 4),
    "CRITICAL": ("red_circle", 5),
    "EMERGENCY": ("red_circle", 5),
}

UNKNOWN_LEVEL: tuple[str, int] = ("", 0)


def severity_for_level(level: str) -> tuple[str, int]:
    """Return ``(tag, priority)`` for *level*, or ``("", 0)`` if unrecognised."""
    return _LEVELS.get(level, UNKNOWN_LEVEL)


def is_known_level(level: str) -> bool:
    return level in _LEVELS
