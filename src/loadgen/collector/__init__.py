"""OTLP/HTTP collector stub that accepts and discards telemetry."""

from .app import CORS_HEADERS, SIGNAL_ROUTES, create_app, serve

__all__ = [
    "CORS_HEADERS",
    "SIGNAL_ROUTES",
    "create_app",
    "serve",
]
