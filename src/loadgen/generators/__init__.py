"""Telemetry generators for traces, metrics, and logs."""

from .log_generator import LogGenerator
from .metric_generator import MetricGenerator
from .trace_generator import TraceGenerator, format_trace_id

__all__ = [
    "TraceGenerator",
    "MetricGenerator",
    "LogGenerator",
    "format_trace_id",
]
