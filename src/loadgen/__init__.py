"""
OTel Load Generator - synthetic OTEL telemetry for exercising a collection backend.

This package generates OpenTelemetry telemetry (traces, metrics, logs) for
simulated HTTP requests at random intervals, and ships a minimal OTLP/HTTP
collector stub that accepts and discards it.
"""

__version__ = "1.0.0"
