"""Pure functions that convert TrueNAS alerts into ntfy messages."""

from __future__ import annotations

from datetime import datetime, tzinfo

import structlog

from truenas_ntfy.core.types import Alert, NtfyAction, NtfyMessage
from truenas_ntfy.ntfy.severity import is_known_level, severity_for_level

logger = structlog.get_logger(__name__)

TIME_FORMAT = "%Y/%m/%d %H:%M:%S"
DEFAULT_DOMAIN_TAG = "TrueNas"

# Applied in order; "</li><li>" must run before the closing marker is stripped.
_MARKUP_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("<ul><li>", "\n"),
    ("</li><li>", "\n"),
    ("</li></ul>", ""),
    ("<br>", "\n"),
)


def extract_title(formatted: str) -> str:
    """Text before the first colon, or the whole message if there is none."""
    return formatted.split(":", 1)[0]


def normalise_markup(formatted: str) -> str:
    """Turn the TrueNAS list / line-break HTML into plain newlines."""
    text = formatted
    for old, new in _MARKUP_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def format_timestamp(epoch_ms: int, tz: tzinfo | None = None) -> str:
    """Render epoch milliseconds as ``YYYY/MM/DD HH:MM:SS`` (local time if *tz* is None)."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=tz).strftime(TIME_FORMAT)


def render_body(alert: Alert, tz: tzinfo | None = None) -> str:
    lines = [
        f"Level: {alert.level}",
        f"Time: {format_timestamp(alert.created_ms, tz)}",
        f"Last Occurrence: {format_timestamp(alert.last_occurrence_ms, tz)}",
        f"Dismissed: {str(alert.dismissed).lower()}",
        f"Message: {normalise_markup(alert.formatted)}",
    ]
    return "\n".join(lines)


def compose(
    alert: Alert,
    source_url: str,
    *,
    topic: str,
    domain_tag: str = DEFAULT_DOMAIN_TAG,
    tz: tzinfo | None = None,
) -> NtfyMessage:
    """Build the ntfy message for one alert.

    Args:
        alert: Alert as fetched from TrueNAS.
        source_url: TrueNAS web UI URL, used for the click target and the
            "Admin Panel" action.
        topic: ntfy topic to publish to.
        domain_tag: Constant tag identifying the source system.
        tz: Zone for rendered timestamps. Local time if None.

    Returns:
        The message; an unknown level yields priority 0 and no severity tag.
    """
    tag, priority = severity_for_level(alert.level)
    if not is_known_level(alert.level):
        logger.warning("unknown_alert_level", level=alert.level, alert_id=alert.ident)

    tags = [tag, domain_tag] if tag else [domain_tag]

    return NtfyMessage(
        topic=topic,
        title=extract_title(alert.formatted),
        message=render_body(alert, tz),
        tags=tags,
        priority=priority,
        click=source_url,
        actions=[NtfyAction(action="view", label="Admin Panel", url=source_url)],
    )
