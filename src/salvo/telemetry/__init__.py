"""Telemetry for salvo: stdlib logging plus optional OpenTelemetry traces and metrics.

Everything is a no-op until :func:`init_telemetry` is called with a config that
enables an exporter, so library code can create spans and counters freely.
"""

from __future__ import annotations

from .config import TelemetryConfig, init_telemetry, load_telemetry_config
from .logger import apply_log_level, configure_console_logging, get_logger, init_logging
from .metrics import get_meter, init_metrics, record_game_metric, shutdown_metrics
from .tracer import get_tracer, init_tracing, shutdown_tracing

__all__ = [
    "TelemetryConfig",
    "apply_log_level",
    "configure_console_logging",
    "get_logger",
    "get_tracer",
    "get_meter",
    "record_game_metric",
    "init_logging",
    "init_tracing",
    "init_metrics",
    "load_telemetry_config",
    "init_telemetry",
    "shutdown_telemetry",
]


def shutdown_telemetry() -> None:
    """Flush and stop whatever exporters :func:`init_telemetry` started."""

    shutdown_tracing()
    shutdown_metrics()
