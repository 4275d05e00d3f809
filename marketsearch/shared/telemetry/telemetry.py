"""OpenTelemetry providers for the search service.

setup_from_settings() installs a tracer provider (search spans from
`traced`) and a meter provider (SearchMetrics counters) with console or
OTLP gRPC exporters. Until it runs, the OpenTelemetry API hands out no-op
providers, so spans and counters cost nothing in tests.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

if TYPE_CHECKING:
    from marketsearch.core.config import Settings

logger = logging.getLogger(__name__)

EXPORTER_CONSOLE = "console"
EXPORTER_OTLP = "otlp"
EXPORTER_NONE = "none"

# Liveness probes would dominate the trace volume.
UNTRACED_URLS = "/api/v1/health"


def build_exporters(
    exporter_type: str, otlp_endpoint: str | None
) -> tuple[SpanExporter, MetricExporter] | None:
    """(span, metric) exporters for exporter_type; None for 'none'.

    'otlp' without an endpoint, or an unknown type, falls back to console.
    """
    if exporter_type == EXPORTER_NONE:
        return None
    if exporter_type == EXPORTER_OTLP and otlp_endpoint:
        insecure = otlp_endpoint.startswith("http://")
        return (
            OTLPSpanExporter(endpoint=otlp_endpoint, insecure=insecure),
            OTLPMetricExporter(endpoint=otlp_endpoint, insecure=insecure),
        )
    if exporter_type != EXPORTER_CONSOLE:
        logger.warning("Unknown telemetry exporter %r, using console", exporter_type)
    return ConsoleSpanExporter(), ConsoleMetricExporter()


class TelemetryConfig:
    """Owns the tracer and meter providers for one process."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
    ) -> None:
        self.resource = Resource(
            attributes={
                SERVICE_NAME: service_name,
                SERVICE_VERSION: service_version,
                "deployment.environment": environment,
            }
        )
        self.tracer_provider: TracerProvider | None = None
        self.meter_provider: MeterProvider | None = None

    @property
    def active(self) -> bool:
        return self.tracer_provider is not None

    def setup_telemetry(
        self,
        exporter_type: str = EXPORTER_CONSOLE,
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> bool:
        """Create the providers and register them globally.

        Args:
            exporter_type: 'console', 'otlp' or 'none'.
            otlp_endpoint: OTLP gRPC endpoint, e.g. 'http://collector:4317'.
            sample_rate: Root span sampling ratio in [0, 1]; child spans follow
                their parent's decision.

        Returns:
            True if the providers were installed. Setup failures are logged
            and leave the no-op providers in place.
        """
        try:
            exporters = build_exporters(exporter_type, otlp_endpoint)
            tracer_provider = TracerProvider(
                resource=self.resource,
                sampler=ParentBased(TraceIdRatioBased(sample_rate)),
            )
            readers: list[PeriodicExportingMetricReader] = []
            if exporters is not None:
                span_exporter, metric_exporter = exporters
                tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
                readers.append(PeriodicExportingMetricReader(metric_exporter))
            meter_provider = MeterProvider(resource=self.resource, metric_readers=readers)
        except Exception:
            logger.exception("Telemetry setup failed; spans and search counters are disabled")
            return False

        trace.set_tracer_provider(tracer_provider)
        metrics.set_meter_provider(meter_provider)
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        logger.info("Telemetry initialized (exporter=%s, sample_rate=%.2f)", exporter_type, sample_rate)
        return True

    def instrument_fastapi(self, app: FastAPI) -> None:
        """Request spans for the search endpoints (health excluded)."""
        if not self.active:
            return
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=self.tracer_provider, excluded_urls=UNTRACED_URLS
        )

    def instrument_sqlalchemy(self, engine: AsyncEngine) -> None:
        """Statement spans for the postgres store backend."""
        if not self.active:
            return
        SQLAlchemyInstrumentor().instrument(
            engine=engine.sync_engine, tracer_provider=self.tracer_provider
        )

    def shutdown(self) -> None:
        """Flush pending spans and metrics, then stop both providers."""
        for provider in (self.tracer_provider, self.meter_provider):
            if provider is not None:
                provider.shutdown()
        self.tracer_provider = None
        self.meter_provider = None
        logger.info("Telemetry shut down")


def setup_from_settings(settings: "Settings") -> TelemetryConfig | None:
    """Install telemetry when settings.telemetry_enabled; returns the config or None."""
    if not settings.telemetry_enabled:
        return None
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        environment=settings.telemetry_environment,
    )
    if not telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    ):
        return None
    set_telemetry(telemetry)
    return telemetry


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.Lock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the process telemetry set at startup, if any."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
