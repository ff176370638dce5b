"""Run orchestration — one pass from TrueNAS to ntfy."""

from truenas_ntfy.bridge.runner import AlertBridge, RunResult, run_once

__all__ = [
    "AlertBridge",
    "RunResult",
    "run_once",
]
