"""
Export target from environment (aligned with the Uptrace DSN convention).

The generator reads a single connection descriptor from UPTRACE_DSN (or --dsn).
The OTLP endpoint is the DSN's scheme://host[:port]; the DSN itself is sent
verbatim in the uptrace-dsn header. Without a DSN the explicit endpoint is used
and no header is sent.
"""

import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit

DSN_ENV_VAR = "UPTRACE_DSN"
DSN_HEADER = "uptrace-dsn"


@dataclass(frozen=True)
class ExportTarget:
    """OTLP base endpoint plus headers attached to every export request."""

    endpoint: str
    headers: dict[str, str] = field(default_factory=dict)


def get_dsn() -> str | None:
    """DSN from UPTRACE_DSN env, or None when unset or blank."""
    raw = os.environ.get(DSN_ENV_VAR, "").strip()
    return raw or None


def parse_dsn(dsn: str) -> str:
    """Return scheme://host[:port] of a DSN, dropping credentials, path and query."""
    parts = urlsplit(dsn.strip())
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Invalid DSN (expected scheme://[token@]host[:port]): {dsn!r}")
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    try:
        port = parts.port
    except ValueError:
        raise ValueError(f"Invalid DSN port: {dsn!r}") from None
    return f"{parts.scheme}://{host}:{port}" if port else f"{parts.scheme}://{host}"


def resolve_export_target(dsn: str | None, endpoint: str) -> ExportTarget:
    """DSN wins over the explicit endpoint; the DSN is forwarded as a header."""
    if dsn:
        return ExportTarget(endpoint=parse_dsn(dsn), headers={DSN_HEADER: dsn})
    return ExportTarget(endpoint=endpoint.rstrip("/"))
