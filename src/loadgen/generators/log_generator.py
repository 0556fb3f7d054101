"""
Structured log records for the load test, exported via an OTLP Logger.

Records go through a stdlib logger bridged by LoggingHandler, so severity
comes from the logging level and `extra` keys become log attributes. The
runner emits request logs inside the request span's context, which gives each
record the span's trace_id/span_id for correlation.
"""

import logging
from typing import Any

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, LogRecordExporter
from opentelemetry.sdk.resources import Resource

from ..config import Settings, resource_attributes
from ..workload.request import SimulatedRequest

TELEMETRY_LOGGER_NAME = "loadgen.telemetry"
LOG_SOURCE = "load-testing"


class LogGenerator:
    """Emit start/completion/error and lifecycle log records."""

    def __init__(
        self,
        exporter: LogRecordExporter,
        settings: Settings | None = None,
        max_export_batch_size: int = 500,
        logger_name: str = TELEMETRY_LOGGER_NAME,
        register_global: bool = True,
    ):
        """Initialize log generator with exporter."""
        resource = Resource.create(resource_attributes(settings))
        self.provider = LoggerProvider(resource=resource)
        self.provider.add_log_record_processor(
            BatchLogRecordProcessor(exporter, max_export_batch_size=max_export_batch_size)
        )
        if register_global:
            set_logger_provider(self.provider)

        self.handler = LoggingHandler(
            level=logging.DEBUG,
            logger_provider=self.provider,
        )

        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.addHandler(self.handler)
        # Telemetry records go to the exporter only, not the console.
        self.logger.propagate = False

    def _attrs(self, **extra: Any) -> dict[str, Any]:
        attrs: dict[str, Any] = {"log.source": LOG_SOURCE}
        attrs.update(extra)
        return attrs

    def _request_attrs(self, request: SimulatedRequest) -> dict[str, Any]:
        return self._attrs(**{"http.method": request.method, "http.url": request.endpoint})

    def log_request_start(self, request: SimulatedRequest):
        attrs = self._request_attrs(request)
        attrs["span.number"] = request.sequence
        self.logger.info(f"Starting {request.method} {request.endpoint}", extra=attrs)

    def log_request_completed(self, request: SimulatedRequest):
        attrs = self._request_attrs(request)
        attrs["duration_ms"] = request.duration_ms
        self.logger.info(
            f"Completed {request.method} {request.endpoint} in {request.duration_ms}ms",
            extra=attrs,
        )

    def log_request_error(self, request: SimulatedRequest):
        attrs = self._request_attrs(request)
        attrs["http.status_code"] = request.status_code
        attrs["error"] = True
        self.logger.error(
            f"Error: {request.method} {request.endpoint} returned {request.status_code}",
            extra=attrs,
        )

    def log_test_started(self):
        self.logger.info("Load test started", extra=self._attrs(**{"test.action": "start"}))

    def log_test_stopped(self, total_spans: int):
        self.logger.info(
            "Load test stopped",
            extra=self._attrs(**{"test.action": "stop", "total.spans": total_spans}),
        )

    def shutdown(self):
        """Detach the handler and shutdown the logger provider."""
        self.logger.removeHandler(self.handler)
        self.provider.shutdown()
