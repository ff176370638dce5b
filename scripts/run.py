#!/usr/bin/env python3
"""Run entrypoint — forwards in-scope TrueNAS alerts to ntfy once and exits.

Intended to be invoked by an external scheduler (cron, systemd timer, k8s
CronJob). Configuration comes from the environment (TRUENASURL, APIKEY,
NTFYURL, TOPIC, INTERVAL) and an optional YAML file.

Usage::

    # Environment only
    INTERVAL=24h python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from truenas_ntfy.bridge.runner import run_once
from truenas_ntfy.core.config import load_settings
from truenas_ntfy.core.exceptions import ConfigError
from truenas_ntfy.core.logging import setup_logging
from truenas_ntfy.truenas.exceptions import FetchError

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_FETCH = 2


async def run(args: argparse.Namespace) -> int:
    """Load settings, run the bridge once, and map failures to exit codes."""
    # Provisional logging so configuration errors are reported in the usual format.
    setup_logging(level=args.log_level)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        logger.error("config_invalid", error=str(exc))
        return EXIT_CONFIG

    setup_logging(settings.logging, level=args.log_level)
    logger.info(
        "bridge_starting",
        truenas=settings.truenas.url,
        ntfy=settings.ntfy.url,
        lookback_secs=settings.lookback.total_seconds(),
    )

    try:
        await run_once(settings)
    except FetchError as exc:
        logger.error(
            "truenas_fetch_failed",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return EXIT_FETCH

    return EXIT_OK


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Forward TrueNAS alerts to an ntfy topic (single run).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
