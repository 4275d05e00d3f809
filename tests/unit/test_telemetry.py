"""Tests for telemetry setup from settings."""

from opentelemetry.sdk.metrics.export import ConsoleMetricExporter
from opentelemetry.sdk.trace.export import ConsoleSpanExporter

from marketsearch.core.config import Settings
from marketsearch.shared.telemetry.telemetry import (
    build_exporters,
    get_telemetry,
    set_telemetry,
    setup_from_settings,
)


def test_disabled_by_default() -> None:
    assert setup_from_settings(Settings(_env_file=None)) is None


def test_none_exporter() -> None:
    assert build_exporters("none", None) is None


def test_otlp_without_endpoint_falls_back_to_console() -> None:
    span_exporter, metric_exporter = build_exporters("otlp", None)
    assert isinstance(span_exporter, ConsoleSpanExporter)
    assert isinstance(metric_exporter, ConsoleMetricExporter)


def test_setup_and_shutdown() -> None:
    settings = Settings(_env_file=None, telemetry_enabled=True, telemetry_exporter="none")
    telemetry = setup_from_settings(settings)
    try:
        assert telemetry is not None
        assert telemetry.active
        assert get_telemetry() is telemetry
    finally:
        if telemetry is not None:
            telemetry.shutdown()
        set_telemetry(None)
    assert not telemetry.active
