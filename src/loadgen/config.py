"""
Configuration for the load generator and collector stub.

Static settings (resource attributes, request catalog, generator defaults,
collector address) are loaded from config/config.yaml under the resources root.
When running from source, resource/ at project root is used. When the package
is installed, set LOADGEN_ROOT to a directory containing config/.

LoadConfig is the mutable, validated generator configuration (interval bounds
and batch size) that the scheduler reads on every cycle.
"""

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


def get_resources_root() -> Path:
    """Return the root directory for config resources.

    Resolution order:
    1. LOADGEN_ROOT env var (must contain config/)
    2. resource/ under directory containing pyproject.toml (when running from source)
    3. loadgen/resources/ next to this package (when installed)
    """
    env_root = os.environ.get("LOADGEN_ROOT")
    if env_root:
        p = Path(env_root).resolve()
        if p.is_dir():
            return p
    here = Path(__file__).resolve().parent
    for candidate in [here, *here.parents]:
        if (candidate / "pyproject.toml").is_file():
            return candidate / "resource"
    return Path(__file__).resolve().parent / "resources"


_RESOURCES_ROOT = get_resources_root()
CONFIG_PATH = _RESOURCES_ROOT / "config" / "config.yaml"

SERVICE_NAME = "load-testing-web"
SERVICE_VERSION = "1.0.0"
SCOPE_NAME = "load-testing"
SCOPE_VERSION = "1.0.0"

DEFAULT_COLLECTOR_HOST = "0.0.0.0"
DEFAULT_COLLECTOR_PORT = 14318
DEFAULT_ENDPOINT = f"http://localhost:{DEFAULT_COLLECTOR_PORT}"

# Bounds enforced by LoadConfig.update.
MIN_INTERVAL_FLOOR_MS = 10
MIN_BATCH_SIZE = 1

DEFAULT_ENDPOINTS = (
    "/api/users",
    "/api/products",
    "/api/orders",
    "/api/checkout",
    "/api/inventory",
    "/api/payments",
    "/api/notifications",
    "/api/analytics",
)
DEFAULT_METHODS = ("GET", "POST", "PUT", "DELETE")
# Weighted by repetition: 2xx dominate, a third of draws are errors.
DEFAULT_STATUS_CODES = (200, 200, 200, 200, 201, 204, 400, 404, 500)
DEFAULT_LOG_MESSAGES = (
    "Processing request",
    "Request completed successfully",
    "Cache hit",
    "Cache miss - fetching from database",
    "Database query executed",
    "User authenticated",
    "Session validated",
    "Rate limit check passed",
    "Webhook triggered",
    "Background job queued",
)
DEFAULT_DURATION_MIN_MS = 50
DEFAULT_DURATION_MAX_MS = 549


def load_yaml(path: Path, default: Any = None) -> Any:
    """Load YAML file; return default on missing file or parse error."""
    if default is None:
        default = {}
    if not path.exists():
        return default
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return default
    return data if isinstance(data, dict) else default


def _parse_int(value: Any) -> int | None:
    """Integer value of a config candidate, or None when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@dataclass
class LoadConfig:
    """Interval bounds (ms) and batch size read by the scheduler on each cycle."""

    min_interval: int = 100
    max_interval: int = 1000
    batch_size: int = 1

    def update(self, candidate: Mapping[str, Any]) -> dict[str, int]:
        """Apply the valid fields of a partial update; return what was applied.

        min_interval must be >= 10, max_interval must be >= the resulting
        min_interval, batch_size must be >= 1. A min_interval that would end
        up above max_interval is rejected. Invalid fields are ignored.
        """
        cur_min, cur_max = self.min_interval, self.max_interval
        new_min = _parse_int(candidate.get("min_interval"))
        new_max = _parse_int(candidate.get("max_interval"))
        batch = _parse_int(candidate.get("batch_size"))

        if new_min is None or new_min < MIN_INTERVAL_FLOOR_MS:
            new_min = None
        eff_min = new_min if new_min is not None else cur_min
        max_ok = new_max is not None and new_max >= eff_min
        eff_max = new_max if max_ok else cur_max
        if new_min is not None and eff_max < new_min:
            # Keep the old floor and re-check max against it.
            new_min, eff_min = None, cur_min
            max_ok = new_max is not None and new_max >= eff_min
            eff_max = new_max if max_ok else cur_max

        applied: dict[str, int] = {}
        if new_min is not None:
            self.min_interval = applied["min_interval"] = new_min
        if max_ok:
            self.max_interval = applied["max_interval"] = eff_max
        if batch is not None and batch >= MIN_BATCH_SIZE:
            self.batch_size = applied["batch_size"] = batch
        return applied

    def describe(self) -> str:
        return f"interval={self.min_interval}-{self.max_interval}ms, batch={self.batch_size}"


@dataclass(frozen=True)
class RequestCatalog:
    """Fixed candidate sets the request factory draws from."""

    endpoints: tuple[str, ...] = DEFAULT_ENDPOINTS
    methods: tuple[str, ...] = DEFAULT_METHODS
    status_codes: tuple[int, ...] = DEFAULT_STATUS_CODES
    log_messages: tuple[str, ...] = DEFAULT_LOG_MESSAGES
    duration_min_ms: int = DEFAULT_DURATION_MIN_MS
    duration_max_ms: int = DEFAULT_DURATION_MAX_MS


@dataclass
class Settings:
    """Static settings resolved from config.yaml."""

    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    generator: LoadConfig = field(default_factory=LoadConfig)
    catalog: RequestCatalog = field(default_factory=RequestCatalog)
    collector_host: str = DEFAULT_COLLECTOR_HOST
    collector_port: int = DEFAULT_COLLECTOR_PORT


def _str_tuple(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return default
    values = tuple(str(v) for v in raw if isinstance(v, str) and v.strip())
    return values or default


def _int_tuple(raw: Any, default: tuple[int, ...]) -> tuple[int, ...]:
    if not isinstance(raw, list):
        return default
    values = tuple(v for v in (_parse_int(x) for x in raw) if v is not None)
    return values or default


def _load_catalog(raw: Any) -> RequestCatalog:
    if not isinstance(raw, dict):
        return RequestCatalog()
    duration = raw.get("duration_ms") if isinstance(raw.get("duration_ms"), dict) else {}
    lo = _parse_int(duration.get("min"))
    hi = _parse_int(duration.get("max"))
    if lo is None or hi is None or lo < 0 or hi < lo:
        lo, hi = DEFAULT_DURATION_MIN_MS, DEFAULT_DURATION_MAX_MS
    return RequestCatalog(
        endpoints=_str_tuple(raw.get("endpoints"), DEFAULT_ENDPOINTS),
        methods=_str_tuple(raw.get("methods"), DEFAULT_METHODS),
        status_codes=_int_tuple(raw.get("status_codes"), DEFAULT_STATUS_CODES),
        log_messages=_str_tuple(raw.get("log_messages"), DEFAULT_LOG_MESSAGES),
        duration_min_ms=lo,
        duration_max_ms=hi,
    )


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from config/config.yaml; missing or invalid keys keep defaults."""
    data = load_yaml(config_path or CONFIG_PATH)
    settings = Settings()

    service = data.get("service")
    if isinstance(service, dict):
        if isinstance(service.get("name"), str) and service["name"].strip():
            settings.service_name = service["name"].strip()
        if isinstance(service.get("version"), str) and service["version"].strip():
            settings.service_version = service["version"].strip()

    generator = data.get("generator")
    if isinstance(generator, dict):
        settings.generator.update(generator)

    settings.catalog = _load_catalog(data.get("catalog"))

    collector = data.get("collector")
    if isinstance(collector, dict):
        if isinstance(collector.get("host"), str) and collector["host"].strip():
            settings.collector_host = collector["host"].strip()
        port = _parse_int(collector.get("port"))
        if port is not None and 0 < port < 65536:
            settings.collector_port = port
    return settings


def resource_attributes(settings: Settings | None = None) -> dict[str, str]:
    """Resource attributes shared by the trace, metric and log providers."""
    s = settings or Settings()
    return {
        "service.name": s.service_name,
        "service.version": s.service_version,
    }
