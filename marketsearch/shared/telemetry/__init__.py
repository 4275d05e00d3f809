"""Shared telemetry: logging setup, OpenTelemetry config, tracing, and search metrics."""

from marketsearch.shared.telemetry.logging import setup_logging
from marketsearch.shared.telemetry.metrics import SearchMetrics, get_search_metrics
from marketsearch.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
    setup_from_settings,
)
from marketsearch.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "SearchMetrics",
    "get_search_metrics",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "setup_from_settings",
    "add_span_attributes",
    "traced",
]
