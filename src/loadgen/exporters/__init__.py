"""Telemetry exporters for OTLP backends and the console."""

from .console_exporter import create_console_exporters, format_span_line
from .otlp_exporter import (
    create_otlp_log_exporter,
    create_otlp_metric_exporter,
    create_otlp_trace_exporter,
    signal_endpoint,
)

__all__ = [
    "create_otlp_trace_exporter",
    "create_otlp_metric_exporter",
    "create_otlp_log_exporter",
    "signal_endpoint",
    "create_console_exporters",
    "format_span_line",
]
