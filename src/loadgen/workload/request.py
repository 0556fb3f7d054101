"""
Simulated HTTP requests and the random draws that shape their telemetry.

Every random decision the runner makes (request attributes, span events,
child span, rows affected, cycle interval) goes through RequestFactory so a
seeded random.Random gives reproducible runs.
"""

import random
from dataclasses import dataclass
from typing import Any

from ..config import RequestCatalog

DB_SPAN_PROBABILITY = 0.3
MIN_SPAN_EVENTS = 1
MAX_SPAN_EVENTS = 3
MAX_ROWS_AFFECTED = 99


@dataclass(frozen=True)
class SimulatedRequest:
    """One generated request; attributes are fixed at creation."""

    method: str
    endpoint: str
    status_code: int
    duration_ms: int
    sequence: int
    run_id: int = 0

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def span_name(self) -> str:
        return f"{self.method} {self.endpoint}"

    @property
    def url(self) -> str:
        return f"https://example.com{self.endpoint}"

    def metric_attributes(self) -> dict[str, Any]:
        """Attributes for the request counter and duration histogram."""
        return {
            "method": self.method,
            "endpoint": self.endpoint,
            "status_code": str(self.status_code),
        }


def relative_timestamp(duration_ms: int, index: int, count: int) -> str:
    """Label for span event `index` of `count`, spaced evenly inside the duration."""
    return f"{duration_ms * (index + 1) // (count + 1)}ms"


class RequestFactory:
    """Draw request attributes and per-request telemetry shape from a catalog."""

    def __init__(
        self,
        catalog: RequestCatalog | None = None,
        rng: random.Random | None = None,
        db_span_probability: float = DB_SPAN_PROBABILITY,
    ):
        self.catalog = catalog or RequestCatalog()
        self.rng = rng or random.Random()
        self.db_span_probability = db_span_probability

    def create(self, sequence: int, run_id: int = 0) -> SimulatedRequest:
        """Pick method, endpoint, status and duration independently."""
        c = self.catalog
        return SimulatedRequest(
            method=self.rng.choice(c.methods),
            endpoint=self.rng.choice(c.endpoints),
            status_code=self.rng.choice(c.status_codes),
            duration_ms=self.rng.randint(c.duration_min_ms, c.duration_max_ms),
            sequence=sequence,
            run_id=run_id,
        )

    def event_messages(self) -> list[str]:
        count = self.rng.randint(MIN_SPAN_EVENTS, MAX_SPAN_EVENTS)
        return [self.rng.choice(self.catalog.log_messages) for _ in range(count)]

    def wants_db_span(self) -> bool:
        return self.rng.random() < self.db_span_probability

    def rows_affected(self) -> int:
        return self.rng.randint(0, MAX_ROWS_AFFECTED)

    def interval_ms(self, min_interval: int, max_interval: int) -> int:
        """Delay before the next cycle, uniform over [min_interval, max_interval]."""
        return self.rng.randint(min_interval, max_interval)
