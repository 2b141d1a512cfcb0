"""Command line entry point.

Usage:
    session-orchestrator [TARGET] --count N [--slow --batch-size 100 --batch-delay 30] [--no-dashboard]

Missing TARGET or --count are prompted for on stdin.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, List, Optional, Sequence

from .aggregator import SessionAggregator
from .cancellation import ShutdownSignal, install_signal_handlers, remove_signal_handlers
from .collaborators import HTTPSessionProvider, RoutingPathPool, WebSocketTransport
from .config import ConfigurationError
from .dashboard import Dashboard
from .dashboard_helpers import format_final_summary
from .errors import TargetResolutionFailed
from .jitter import JitterSource
from .logging_config import setup_logging
from .reporters import LoggingReporter, SessionReporter
from .runner import Orchestrator, RunSummary, extract_target_name
from .scheduler import BatchPlan
from .service_runner import run_async_service
from .session_task_helpers import SessionTiming
from .settings import OrchestratorSettings, load_settings

SERVICE_NAME = "session-orchestrator"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=SERVICE_NAME, description="Ramp up and hold concurrent client sessions.")
    parser.add_argument("target", nargs="?", help="Target link or name")
    parser.add_argument("-n", "--count", type=int, help="Number of sessions to start")
    parser.add_argument("--batch-size", type=int, help="Number of connections to start per batch")
    parser.add_argument("--batch-delay", type=float, help="Delay in seconds between batches")
    parser.add_argument("--slow", action="store_true", help="Enable slow mode with batch processing and delays")
    parser.add_argument("--no-dashboard", action="store_true", help="Disable dashboard and use verbose logging instead")
    parser.add_argument("--proxy-file", help="Proxy list, one host:port[:user:pass] per line")
    parser.add_argument("--seed", type=int, help="Seed for reproducible jitter and proxy selection")
    parser.add_argument("--log-dir", help="Also write logs to this directory")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def parse_count(raw: str) -> int:
    try:
        count = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError.invalid_session_count(raw) from exc
    if count <= 0:
        raise ConfigurationError.invalid_session_count(raw)
    return count


def resolve_inputs(args: argparse.Namespace, prompt: Callable[[str], str] = input) -> tuple[str, int]:
    """Fill the target and count from arguments, prompting for whatever is missing."""
    raw_target = args.target if args.target else prompt("Target link or name: ")
    target = extract_target_name(raw_target)
    if not target:
        raise ConfigurationError.missing_value("target")

    if args.count is not None:
        count = parse_count(str(args.count))
    else:
        count = parse_count(prompt("How many sessions to start: "))
    return target, count


def build_plan(args: argparse.Namespace, settings: OrchestratorSettings, count: int) -> Optional[BatchPlan]:
    if not args.slow:
        return None
    return BatchPlan(batch_size=settings.batch_size, batch_delay=settings.batch_delay_seconds, total_count=count)


async def run_orchestration(
    args: argparse.Namespace,
    settings: OrchestratorSettings,
    target: str,
    count: int,
) -> RunSummary:
    jitter = JitterSource(args.seed)
    routing = RoutingPathPool.from_file(settings.proxy_file, jitter.spawn())
    timing = SessionTiming.from_settings(settings)
    plan = build_plan(args, settings, count)

    shutdown = ShutdownSignal()
    install_signal_handlers(shutdown)

    aggregator = SessionAggregator(count, target_name=target)
    reporters: List[SessionReporter] = []
    dashboard: Optional[Dashboard] = None
    if args.no_dashboard:
        reporters.append(LoggingReporter(timing.max_attempts))
    else:
        dashboard = Dashboard(aggregator, interval=settings.dashboard_interval_seconds)

    try:
        async with HTTPSessionProvider(
            settings.resolve_url,
            settings.token_url,
            routing,
            request_timeout=settings.request_timeout_seconds,
            shutdown=shutdown,
        ) as provider:
            transport = WebSocketTransport(settings.websocket_url, dial_timeout=settings.dial_timeout_seconds)
            orchestrator = Orchestrator(provider, transport, routing, timing=timing, jitter=jitter)
            if dashboard is not None:
                dashboard.start()
            return await orchestrator.run(
                count,
                plan,
                target,
                shutdown=shutdown,
                aggregator=aggregator,
                reporters=reporters,
            )
    finally:
        if dashboard is not None:
            await dashboard.stop()
        remove_signal_handlers()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(SERVICE_NAME, verbose=args.no_dashboard, debug=args.debug, log_dir=args.log_dir)

    try:
        settings = load_settings(
            proxy_file=args.proxy_file,
            batch_size=args.batch_size,
            batch_delay_seconds=args.batch_delay,
        )
        target, count = resolve_inputs(args)
    except (ConfigurationError, EOFError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if args.slow:
        logger.info("Slow mode enabled: batch size=%d, delay=%.1fs", settings.batch_size, settings.batch_delay_seconds)

    try:
        summary = run_async_service(
            lambda: run_orchestration(args, settings, target, count),
            service_name=SERVICE_NAME,
        )
    except (ConfigurationError, TargetResolutionFailed) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if summary is None:
        return 130
    if args.no_dashboard:
        logger.info("All connections stopped. Exiting.")
    else:
        sys.stdout.write(format_final_summary(summary.snapshot, time.time()) + "\n")
    return 0


__all__ = ["build_parser", "main", "parse_count", "resolve_inputs", "run_orchestration"]
