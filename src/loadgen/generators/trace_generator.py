"""
Spans for simulated requests.

Example tree for one request (child span in ~30% of requests):
  GET /api/orders (SERVER)            events: 1-3 catalog messages
  └── database.query (CLIENT)         event: Query executed (db.rows_affected)

Spans are started by the runner and ended later from scheduler callbacks, so
this module hands out live Span objects rather than context managers.
"""

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from ..config import SCOPE_NAME, SCOPE_VERSION, Settings, resource_attributes
from ..workload.request import SimulatedRequest, relative_timestamp

DB_SPAN_NAME = "database.query"
DB_SPAN_ATTRIBUTES = {
    "db.system": "postgresql",
    "db.operation": "SELECT",
    "db.name": "mydb",
}


def format_trace_id(span: Span) -> str:
    return format(span.get_span_context().trace_id, "032x")


class TraceGenerator:
    """Start and finish request spans on a dedicated tracer provider."""

    def __init__(
        self,
        exporter: SpanExporter,
        settings: Settings | None = None,
        max_export_batch_size: int = 512,
        register_global: bool = True,
    ):
        """Initialize trace generator with exporter."""
        resource = Resource.create(resource_attributes(settings))
        self.provider = TracerProvider(resource=resource)
        self.provider.add_span_processor(
            BatchSpanProcessor(exporter, max_export_batch_size=max_export_batch_size)
        )
        if register_global:
            trace.set_tracer_provider(self.provider)
        self.tracer = self.provider.get_tracer(SCOPE_NAME, SCOPE_VERSION)

    def start_request_span(self, request: SimulatedRequest) -> Span:
        return self.tracer.start_span(
            request.span_name,
            kind=SpanKind.SERVER,
            attributes={
                "http.method": request.method,
                "http.url": request.url,
                "http.route": request.endpoint,
                "http.status_code": request.status_code,
                "span.number": request.sequence,
            },
        )

    def add_request_events(
        self, span: Span, request: SimulatedRequest, messages: list[str]
    ) -> None:
        """Attach one event per message, labelled with its evenly spaced relative time."""
        for i, message in enumerate(messages):
            span.add_event(
                message,
                {
                    "event.index": i,
                    "timestamp.relative": relative_timestamp(request.duration_ms, i, len(messages)),
                },
            )

    def start_db_span(self, parent: Span) -> Span:
        """Start a database.query span nested under the request span."""
        return self.tracer.start_span(
            DB_SPAN_NAME,
            context=trace.set_span_in_context(parent),
            kind=SpanKind.CLIENT,
            attributes=DB_SPAN_ATTRIBUTES,
        )

    def finish_db_span(self, span: Span, rows_affected: int) -> None:
        span.add_event("Query executed", {"db.rows_affected": rows_affected})
        span.end()

    def finish_request_span(self, span: Span, request: SimulatedRequest) -> None:
        """Set the terminal status from the request's status code and end the span."""
        if request.is_error:
            span.set_status(Status(StatusCode.ERROR, f"HTTP {request.status_code} Error"))
        else:
            span.set_status(Status(StatusCode.OK))
        span.end()

    @staticmethod
    def trace_id(span: Span) -> str:
        return format_trace_id(span)

    def force_flush(self, timeout_millis: int = 5000) -> bool:
        return self.provider.force_flush(timeout_millis)

    def shutdown(self):
        """Flush pending batches and shut the tracer provider down."""
        self.provider.force_flush(5000)
        self.provider.shutdown()
