"""
Drive the load test: batches of simulated requests at random intervals.

The runner orchestrates:
- The generation cycle (one pending timer; stop() cancels it)
- One request span per simulated request, ended after its duration
- An optional database.query child span ended after half the duration
- Correlated metrics and logs on generation and completion

All state changes happen in scheduler callbacks on one thread, so nothing is
locked. Completions already scheduled when stop() is called still run.
"""

import logging
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Span

from ..config import LoadConfig, RequestCatalog
from .request import RequestFactory, SimulatedRequest
from .scheduler import Scheduler, TimerHandle

if TYPE_CHECKING:
    from ..generators.log_generator import LogGenerator
    from ..generators.metric_generator import MetricGenerator
    from ..generators.trace_generator import TraceGenerator

logger = logging.getLogger(__name__)

TRACE_ID_EVERY = 10


class RunEventKind(Enum):
    STARTED = "started"
    STOPPED = "stopped"
    COMPLETED = "completed"
    TRACE_ID = "trace_id"


@dataclass(frozen=True)
class RunEvent:
    kind: RunEventKind
    total: int = 0
    sequence: int = 0
    request: SimulatedRequest | None = None
    trace_id: str | None = None


@dataclass
class RunState:
    """Run flag and counters. active never drops below zero."""

    running: bool = False
    run_id: int = 0
    total_generated: int = 0
    active: int = 0
    completed: int = 0


class LoadTestRunner:
    """Generate request telemetry until stopped."""

    def __init__(
        self,
        trace_generator: "TraceGenerator",
        scheduler: Scheduler,
        config: LoadConfig | None = None,
        metric_generator: "MetricGenerator | None" = None,
        log_generator: "LogGenerator | None" = None,
        catalog: RequestCatalog | None = None,
        rng: random.Random | None = None,
        request_factory: RequestFactory | None = None,
    ):
        """Initialize runner with generators, a scheduler and an optional seeded rng."""
        self.trace_generator = trace_generator
        self.metric_generator = metric_generator
        self.log_generator = log_generator
        self.scheduler = scheduler
        self.config = config or LoadConfig()
        self.requests = request_factory or RequestFactory(catalog, rng)
        self.state = RunState()
        self._timer: TimerHandle | None = None
        self._listeners: list[Callable[[RunEvent], None]] = []

    def add_listener(self, listener: Callable[[RunEvent], None]) -> None:
        self._listeners.append(listener)

    def _emit(self, event: RunEvent) -> None:
        for listener in self._listeners:
            listener(event)

    @property
    def running(self) -> bool:
        return self.state.running

    def start(self) -> bool:
        """Start generating; returns False if already running."""
        if self.state.running:
            logger.info("Load test already running")
            return False

        self.state.running = True
        self.state.run_id += 1
        self.state.total_generated = 0
        self.state.active = 0
        self.state.completed = 0

        if self.log_generator:
            self.log_generator.log_test_started()
        logger.info("Starting continuous load test (%s)", self.config.describe())
        self._emit(RunEvent(RunEventKind.STARTED))
        self._schedule_next()
        return True

    def stop(self) -> bool:
        """Stop generating; in-flight requests still complete. Returns False if not running."""
        if not self.state.running:
            logger.info("Load test not running")
            return False

        self.state.running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        total = self.state.total_generated
        if self.log_generator:
            self.log_generator.log_test_stopped(total)
        logger.info("Load test stopped. Total spans generated: %d", total)
        self._emit(RunEvent(RunEventKind.STOPPED, total=total))
        return True

    def update_config(
        self, candidate: Mapping[str, Any] | None = None, **fields: Any
    ) -> dict[str, int]:
        """Apply valid fields of a partial config update; invalid ones are ignored."""
        merged = dict(candidate or {})
        merged.update(fields)
        applied = self.config.update(merged)
        logger.info("Config updated: %s", self.config.describe())
        return applied

    def _schedule_next(self) -> None:
        delay = self.requests.interval_ms(self.config.min_interval, self.config.max_interval)
        run_id = self.state.run_id
        self._timer = self.scheduler.call_later(delay, lambda: self._run_cycle(run_id))

    def _run_cycle(self, run_id: int) -> None:
        if not self.state.running or run_id != self.state.run_id:
            return
        for _ in range(self.config.batch_size):
            self.generate_request()
        self._schedule_next()

    def generate_request(self) -> SimulatedRequest:
        """Create one request, open its span(s) and schedule their completion."""
        self.state.total_generated += 1
        self.state.active += 1
        request = self.requests.create(self.state.total_generated, self.state.run_id)

        if self.metric_generator:
            self.metric_generator.add_active(1)
            self.metric_generator.record_request(request)

        span = self.trace_generator.start_request_span(request)
        with trace.use_span(span, end_on_exit=False):
            if self.log_generator:
                self.log_generator.log_request_start(request)
            self.trace_generator.add_request_events(span, request, self.requests.event_messages())

        if self.requests.wants_db_span():
            db_span = self.trace_generator.start_db_span(span)
            self.scheduler.call_later(
                request.duration_ms / 2, lambda: self._complete_db_span(db_span)
            )

        self.scheduler.call_later(
            request.duration_ms, lambda: self._complete_request(request, span)
        )
        return request

    def _complete_db_span(self, span: Span) -> None:
        self.trace_generator.finish_db_span(span, self.requests.rows_affected())

    def _complete_request(self, request: SimulatedRequest, span: Span) -> None:
        with trace.use_span(span, end_on_exit=False):
            if request.is_error:
                if self.metric_generator:
                    self.metric_generator.record_error(request)
                if self.log_generator:
                    self.log_generator.log_request_error(request)
            elif self.log_generator:
                self.log_generator.log_request_completed(request)

        if self.metric_generator:
            self.metric_generator.record_duration(request)
            self.metric_generator.add_active(-1)
        self.trace_generator.finish_request_span(span, request)

        # A request left over from a previous run must not touch the fresh counters.
        if request.run_id != self.state.run_id:
            return
        self.state.active = max(0, self.state.active - 1)
        self.state.completed += 1
        sequence = self.state.completed

        logger.debug(
            "[Span #%d] %s -> %d (%dms)",
            sequence,
            request.span_name,
            request.status_code,
            request.duration_ms,
        )
        self._emit(RunEvent(RunEventKind.COMPLETED, sequence=sequence, request=request))
        if sequence % TRACE_ID_EVERY == 0:
            self._emit(
                RunEvent(
                    RunEventKind.TRACE_ID,
                    sequence=sequence,
                    request=request,
                    trace_id=self.trace_generator.trace_id(span),
                )
            )
