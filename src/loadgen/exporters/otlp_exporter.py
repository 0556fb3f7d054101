"""
OTLP exporters for traces, metrics, and logs.

Factory functions build one exporter per signal from a shared ExportTarget
(base endpoint plus auth headers). HTTP exporters post to {endpoint}/v1/<signal>;
gRPC exporters take the bare host:port.
"""

from typing import Any

from ..defaults import ExportTarget

_SIGNAL_PATHS = {
    "traces": "/v1/traces",
    "metrics": "/v1/metrics",
    "logs": "/v1/logs",
}


def signal_endpoint(endpoint: str, signal: str) -> str:
    """Append the OTLP/HTTP path for a signal unless the endpoint already ends with it."""
    path = _SIGNAL_PATHS[signal]
    base = endpoint.rstrip("/")
    return base if base.endswith(path) else f"{base}{path}"


def _grpc_endpoint(endpoint: str) -> str:
    return endpoint.replace("http://", "").replace("https://", "").rstrip("/")


def create_otlp_trace_exporter(target: ExportTarget, protocol: str = "http", **kwargs: Any):
    """
    Create an OTLP span exporter.

    Args:
        target: base endpoint and headers
        protocol: "http" or "grpc"
        **kwargs: Additional exporter configuration (e.g. timeout)

    Returns:
        Configured SpanExporter
    """
    headers = dict(target.headers) or None
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=_grpc_endpoint(target.endpoint), headers=headers, **kwargs)

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (  # type: ignore[assignment]
        OTLPSpanExporter,
    )

    return OTLPSpanExporter(
        endpoint=signal_endpoint(target.endpoint, "traces"), headers=headers, **kwargs
    )


def create_otlp_metric_exporter(target: ExportTarget, protocol: str = "http", **kwargs: Any):
    """Create an OTLP metric exporter (see create_otlp_trace_exporter)."""
    headers = dict(target.headers) or None
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

        return OTLPMetricExporter(
            endpoint=_grpc_endpoint(target.endpoint), headers=headers, **kwargs
        )

    from opentelemetry.exporter.otlp.proto.http.metric_exporter import (  # type: ignore[assignment]
        OTLPMetricExporter,
    )

    return OTLPMetricExporter(
        endpoint=signal_endpoint(target.endpoint, "metrics"), headers=headers, **kwargs
    )


def create_otlp_log_exporter(target: ExportTarget, protocol: str = "http", **kwargs: Any):
    """Create an OTLP log exporter (see create_otlp_trace_exporter)."""
    headers = dict(target.headers) or None
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter

        return OTLPLogExporter(endpoint=_grpc_endpoint(target.endpoint), headers=headers, **kwargs)

    from opentelemetry.exporter.otlp.proto.http._log_exporter import (  # type: ignore[assignment]
        OTLPLogExporter,
    )

    return OTLPLogExporter(
        endpoint=signal_endpoint(target.endpoint, "logs"), headers=headers, **kwargs
    )
