"""
Console exporters for running without a backend.

Spans print as one line each so a busy load test stays readable; metrics and
logs use the SDK's JSON output.
"""

import os

from opentelemetry.sdk._logs.export import ConsoleLogRecordExporter
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import ConsoleSpanExporter


def format_span_line(span: ReadableSpan) -> str:
    """One-line span summary: name, ids, parent, status and duration."""
    ctx = span.context
    trace_id = format(ctx.trace_id, "032x") if ctx else "-"
    span_id = format(ctx.span_id, "016x") if ctx else "-"
    parent_id = format(span.parent.span_id, "016x") if span.parent else "-"
    status = span.status.status_code.name if span.status else "UNSET"
    duration_ms = 0.0
    if span.start_time and span.end_time:
        duration_ms = (span.end_time - span.start_time) / 1e6
    return (
        f"span name={span.name!r} trace_id={trace_id} span_id={span_id} "
        f"parent_id={parent_id} status={status} duration={duration_ms:.0f}ms{os.linesep}"
    )


def create_console_exporters():
    """
    Create console exporters for all signal types.

    Returns:
        Tuple of (trace_exporter, metric_exporter, log_exporter)
    """
    return (
        ConsoleSpanExporter(formatter=format_span_line),
        ConsoleMetricExporter(),
        ConsoleLogRecordExporter(),
    )
