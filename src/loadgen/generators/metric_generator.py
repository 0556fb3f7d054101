"""
Load test metrics emitted via an OTLP Meter.

Instruments:
- load_test.requests: counter of generated requests (method, endpoint, status_code)
- load_test.request_duration: histogram of simulated durations in ms
- load_test.active_spans: up-down counter of requests still in flight
- load_test.errors: counter of requests with status >= 400 (status_code, endpoint)
"""

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    MetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource

from ..config import SCOPE_NAME, SCOPE_VERSION, Settings, resource_attributes
from ..workload.request import SimulatedRequest


class MetricGenerator:
    """Record request, duration, active and error metrics for simulated requests."""

    def __init__(
        self,
        exporter: MetricExporter | None = None,
        settings: Settings | None = None,
        export_interval_ms: int = 5000,
        reader: MetricReader | None = None,
        register_global: bool = True,
    ):
        """Initialize metric generator with an exporter (periodic reader) or an explicit reader."""
        if reader is None:
            if exporter is None:
                raise ValueError("MetricGenerator needs an exporter or a reader")
            reader = PeriodicExportingMetricReader(
                exporter,
                export_interval_millis=export_interval_ms,
            )

        resource = Resource.create(resource_attributes(settings))
        self.provider = MeterProvider(resource=resource, metric_readers=[reader])
        if register_global:
            metrics.set_meter_provider(self.provider)

        self.meter = self.provider.get_meter(SCOPE_NAME, SCOPE_VERSION)
        self._setup_instruments()

    def _setup_instruments(self):
        self.request_counter = self.meter.create_counter(
            "load_test.requests",
            description="Total number of generated requests",
            unit="1",
        )

        self.request_duration = self.meter.create_histogram(
            "load_test.request_duration",
            description="Duration of generated requests in ms",
            unit="ms",
        )

        self.active_spans = self.meter.create_up_down_counter(
            "load_test.active_spans",
            description="Number of currently active spans",
            unit="1",
        )

        self.error_counter = self.meter.create_counter(
            "load_test.errors",
            description="Total number of simulated errors",
            unit="1",
        )

    def record_request(self, request: SimulatedRequest):
        self.request_counter.add(1, request.metric_attributes())

    def record_duration(self, request: SimulatedRequest):
        self.request_duration.record(request.duration_ms, request.metric_attributes())

    def record_error(self, request: SimulatedRequest):
        self.error_counter.add(
            1,
            {"status_code": str(request.status_code), "endpoint": request.endpoint},
        )

    def add_active(self, delta: int):
        self.active_spans.add(delta)

    def shutdown(self):
        """Shutdown the meter provider (exports a final collection)."""
        self.provider.shutdown()
