"""
Command-line interface for the load generator.

Provides commands for:
- Running the continuous load test against an OTLP backend
- Serving the collector stub
- Showing the resolved configuration
"""

import argparse
import asyncio
import logging
import random
import sys
import time
from pathlib import Path

from .collector import serve
from .config import CONFIG_PATH, DEFAULT_ENDPOINT, Settings, load_settings
from .defaults import DSN_ENV_VAR, get_dsn, resolve_export_target
from .exporters.console_exporter import create_console_exporters
from .exporters.otlp_exporter import (
    create_otlp_log_exporter,
    create_otlp_metric_exporter,
    create_otlp_trace_exporter,
)
from .generators import LogGenerator, MetricGenerator, TraceGenerator
from .workload import AsyncioScheduler, LoadTestRunner, RunEvent, RunEventKind

# Upper bound on waiting for in-flight requests after stop (longest simulated duration is well below).
_SETTLE_TIMEOUT_S = 5.0
_SETTLE_POLL_S = 0.05


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="loadgen",
        description="Synthetic OTEL load generator and collector stub",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Serve the collector stub on :14318
  loadgen collector

  # Generate load against the local stub for 30 seconds
  loadgen run --duration 30

  # Generate load against a DSN-addressed backend, 5 requests per cycle
  {DSN_ENV_VAR}=https://token@api.example.com loadgen run --batch-size 5

  # Print telemetry instead of exporting it
  loadgen run --console --duration 5
        """,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to config YAML (default: {CONFIG_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every completed request",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", help="Run the continuous load test")
    run_parser.add_argument(
        "--dsn",
        type=str,
        default=None,
        help=f"Connection DSN; sets endpoint and auth header (default: ${DSN_ENV_VAR})",
    )
    run_parser.add_argument(
        "--endpoint",
        type=str,
        default=DEFAULT_ENDPOINT,
        help=f"OTLP endpoint when no DSN is given (default: {DEFAULT_ENDPOINT})",
    )
    run_parser.add_argument(
        "--protocol",
        choices=("http", "grpc"),
        default="http",
        help="OTLP protocol (default: http)",
    )
    run_parser.add_argument(
        "--min-interval",
        type=str,
        default=None,
        help="Minimum ms between cycles (>= 10; invalid values are ignored)",
    )
    run_parser.add_argument(
        "--max-interval",
        type=str,
        default=None,
        help="Maximum ms between cycles (>= min interval; invalid values are ignored)",
    )
    run_parser.add_argument(
        "--batch-size",
        type=str,
        default=None,
        help="Requests generated per cycle (>= 1; invalid values are ignored)",
    )
    run_parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Seconds to run before stopping (default: until Ctrl-C)",
    )
    run_parser.add_argument(
        "--status-interval",
        type=float,
        default=5.0,
        help="Seconds between status lines; 0 disables (default: 5)",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the random generator for a reproducible run",
    )
    run_parser.add_argument(
        "--console",
        action="store_true",
        help="Print telemetry to stdout instead of exporting via OTLP",
    )
    run_parser.add_argument(
        "--no-metrics",
        action="store_true",
        help="Disable metric export",
    )
    run_parser.add_argument(
        "--no-logs",
        action="store_true",
        help="Disable log export",
    )

    collector_parser = subparsers.add_parser("collector", help="Serve the collector stub")
    collector_parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Listen address (default: from config, 0.0.0.0)",
    )
    collector_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listen port (default: from config, 14318)",
    )

    subparsers.add_parser("show-config", help="Show the resolved configuration")

    return parser


def _build_generators(args: argparse.Namespace, settings: Settings):
    """Create trace/metric/log generators for the selected output."""
    if args.console:
        trace_exporter, metric_exporter, log_exporter = create_console_exporters()
        print("   Output: console")
    else:
        target = resolve_export_target(args.dsn or get_dsn(), args.endpoint)
        trace_exporter = create_otlp_trace_exporter(target, args.protocol)
        metric_exporter = create_otlp_metric_exporter(target, args.protocol)
        log_exporter = create_otlp_log_exporter(target, args.protocol)
        print(f"   Endpoint: {target.endpoint} ({args.protocol})")
        if target.headers:
            print(f"   Headers: {', '.join(sorted(target.headers))}")

    trace_generator = TraceGenerator(trace_exporter, settings=settings)
    metric_generator = (
        MetricGenerator(metric_exporter, settings=settings) if not args.no_metrics else None
    )
    log_generator = LogGenerator(log_exporter, settings=settings) if not args.no_logs else None
    return trace_generator, metric_generator, log_generator


def _print_event(event: RunEvent) -> None:
    if event.kind == RunEventKind.STARTED:
        print("Load test started")
    elif event.kind == RunEventKind.STOPPED:
        print(f"Load test stopped. Total spans generated: {event.total}")
    elif event.kind == RunEventKind.TRACE_ID:
        print(f"   [Span #{event.sequence}] Trace ID: {event.trace_id}")


def _status_line(runner: LoadTestRunner) -> str:
    s = runner.state
    status = "Running" if s.running else "Stopped"
    return f"   Status: {status} | spans={s.total_generated} active={s.active}"


async def _run_load(args: argparse.Namespace, settings: Settings, generators) -> LoadTestRunner:
    trace_generator, metric_generator, log_generator = generators
    runner = LoadTestRunner(
        trace_generator=trace_generator,
        scheduler=AsyncioScheduler(),
        config=settings.generator,
        metric_generator=metric_generator,
        log_generator=log_generator,
        catalog=settings.catalog,
        rng=random.Random(args.seed) if args.seed is not None else None,
    )
    runner.add_listener(_print_event)
    runner.update_config(
        min_interval=args.min_interval,
        max_interval=args.max_interval,
        batch_size=args.batch_size,
    )
    print(f"   Config: {runner.config.describe()}")
    print()

    runner.start()
    started = time.monotonic()
    last_status = started
    try:
        while args.duration <= 0 or time.monotonic() - started < args.duration:
            await asyncio.sleep(0.1)
            now = time.monotonic()
            if args.status_interval > 0 and now - last_status >= args.status_interval:
                print(_status_line(runner))
                last_status = now
    finally:
        runner.stop()
        deadline = time.monotonic() + _SETTLE_TIMEOUT_S
        while runner.state.active and time.monotonic() < deadline:
            await asyncio.sleep(_SETTLE_POLL_S)
    return runner


def cmd_run(args: argparse.Namespace):
    """Run the continuous load test until Ctrl-C or --duration elapses."""
    settings = load_settings(args.config_path)
    print("Starting continuous load test...")
    print(f"   Service: {settings.service_name} {settings.service_version}")

    generators: tuple = (None, None, None)
    try:
        generators = _build_generators(args, settings)
        runner = asyncio.run(_run_load(args, settings, generators))
        print(_status_line(runner))
    except KeyboardInterrupt:
        print("\nGeneration interrupted")
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)
    finally:
        for generator in generators:
            if generator is not None:
                generator.shutdown()


def cmd_collector(args: argparse.Namespace):
    """Serve the collector stub."""
    settings = load_settings(args.config_path)
    host = args.host or settings.collector_host
    port = args.port or settings.collector_port
    print(f"Collector stub listening on {host}:{port} (/v1/traces, /v1/logs, /v1/metrics)")
    serve(host, port)


def cmd_show_config(args: argparse.Namespace):
    """Show the resolved configuration."""
    settings = load_settings(args.config_path)
    catalog = settings.catalog
    print(f"Config: {args.config_path}")
    print(f"   Service: {settings.service_name} {settings.service_version}")
    print(f"   Generator: {settings.generator.describe()}")
    print(f"   Endpoints: {', '.join(catalog.endpoints)}")
    print(f"   Methods: {', '.join(catalog.methods)}")
    print(f"   Status codes: {', '.join(str(c) for c in catalog.status_codes)}")
    print(f"   Duration: {catalog.duration_min_ms}-{catalog.duration_max_ms}ms")
    print(f"   Span event messages: {len(catalog.log_messages)}")
    print(f"   Collector: {settings.collector_host}:{settings.collector_port}")
    dsn = get_dsn()
    print(f"   {DSN_ENV_VAR}: {'set' if dsn else 'not set'}")


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.verbose:
        logging.getLogger("loadgen").setLevel(logging.DEBUG)
    args.config_path = Path(args.config) if args.config else CONFIG_PATH

    if args.command == "run":
        cmd_run(args)
    elif args.command == "collector":
        cmd_collector(args)
    elif args.command == "show-config":
        cmd_show_config(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
