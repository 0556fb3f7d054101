"""Shared fixtures: in-memory telemetry pipelines and a manual clock."""

import io
import logging
import random
from collections.abc import Callable

import pytest
from opentelemetry.sdk._logs.export import ConsoleLogRecordExporter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from loadgen.config import LoadConfig, RequestCatalog
from loadgen.generators import LogGenerator, MetricGenerator, TraceGenerator
from loadgen.workload import LoadTestRunner, ManualScheduler, RequestFactory

TEST_LOGGER_NAME = "loadgen.telemetry.test"


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def trace_generator(span_exporter: InMemorySpanExporter):
    generator = TraceGenerator(span_exporter, register_global=False)
    yield generator
    generator.shutdown()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def metric_generator(metric_reader: InMemoryMetricReader):
    generator = MetricGenerator(reader=metric_reader, register_global=False)
    yield generator
    generator.shutdown()


class RecordCollector(logging.Handler):
    """Keep every record emitted on the telemetry logger (it does not propagate)."""

    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def at(self, level: int) -> list[logging.LogRecord]:
        return [r for r in self.records if r.levelno == level]


@pytest.fixture
def telemetry_logs() -> RecordCollector:
    return RecordCollector()


@pytest.fixture
def log_generator(telemetry_logs: RecordCollector):
    generator = LogGenerator(
        ConsoleLogRecordExporter(out=io.StringIO()),
        logger_name=TEST_LOGGER_NAME,
        register_global=False,
    )
    generator.logger.addHandler(telemetry_logs)
    yield generator
    generator.logger.removeHandler(telemetry_logs)
    generator.shutdown()


@pytest.fixture
def make_runner(
    trace_generator: TraceGenerator,
    metric_generator: MetricGenerator,
    log_generator: LogGenerator,
    scheduler: ManualScheduler,
) -> Callable[..., LoadTestRunner]:
    """Build a runner with a fixed catalog so outcomes are deterministic."""

    def _make(
        status_codes: tuple[int, ...] = (200,),
        duration_ms: int = 100,
        db_span_probability: float = 0.0,
        min_interval: int = 10,
        max_interval: int = 10,
        batch_size: int = 1,
        seed: int = 7,
    ) -> LoadTestRunner:
        catalog = RequestCatalog(
            status_codes=status_codes,
            duration_min_ms=duration_ms,
            duration_max_ms=duration_ms,
        )
        factory = RequestFactory(
            catalog, random.Random(seed), db_span_probability=db_span_probability
        )
        return LoadTestRunner(
            trace_generator=trace_generator,
            scheduler=scheduler,
            config=LoadConfig(min_interval, max_interval, batch_size),
            metric_generator=metric_generator,
            log_generator=log_generator,
            request_factory=factory,
        )

    return _make


def metric_points(reader: InMemoryMetricReader, name: str) -> list:
    """All data points recorded for a metric name (empty when never recorded)."""
    data = reader.get_metrics_data()
    points: list = []
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name == name:
                    points.extend(metric.data.data_points)
    return points
