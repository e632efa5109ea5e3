"""Transition sweep worker.

The governance core owns no timer. This worker is the external recurring
caller of AutomaticTransitionScheduler.run_sweep against the PostgreSQL
stores. Each sweep runs under its own correlation id.

Usage:
    python -m src.workers.transition_sweep_worker --interval 300
    python -m src.workers.transition_sweep_worker --once

Environment:
    DATABASE_URL, LOG_LEVEL, ENVIRONMENT and the GOVERNANCE_* settings,
    optionally loaded from a .env file.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from collections.abc import Sequence

from dotenv import load_dotenv
from prometheus_client import start_http_server
from structlog import get_logger

from src.application.services.automatic_transition_scheduler import (
    AutomaticTransitionScheduler,
)
from src.bootstrap.database import close_database_engine, get_session_factory
from src.bootstrap.governance import build_postgres_core
from src.bootstrap.logging import configure_structlog
from src.domain.errors.store import TransientStoreError
from src.infrastructure.adapters.persistence import create_schema
from src.infrastructure.monitoring.governance_metrics import (
    get_governance_metrics_collector,
)
from src.infrastructure.observability.correlation import correlation_scope

logger = get_logger()

DEFAULT_INTERVAL_SECONDS = 300.0


class TransitionSweepWorker:
    """Calls run_sweep on a fixed interval until stopped."""

    def __init__(
        self,
        scheduler: AutomaticTransitionScheduler,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds}")
        self._scheduler = scheduler
        self._interval = interval_seconds
        self._stopped = asyncio.Event()
        self._log = logger.bind(component="transition_sweep_worker")
        self.sweeps_completed = 0

    def stop(self) -> None:
        """Request the loop to exit after the current sweep."""
        self._stopped.set()

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    async def run_once(self) -> int:
        """Run one sweep.

        Store failures are logged and reported as zero transitions so the
        loop keeps running; the next sweep re-reads everything.

        Returns:
            Number of transitions applied.
        """
        with correlation_scope() as correlation_id:
            log = self._log.bind(correlation_id=correlation_id)
            try:
                events = await self._scheduler.run_sweep()
            except TransientStoreError as exc:
                log.error("sweep_store_failure", **exc.to_dict())
                return 0
            self.sweeps_completed += 1
            log.info("sweep_tick", transitions=len(events))
            return len(events)

    async def run(self) -> None:
        """Sweep every interval until stop() is called."""
        self._log.info("sweep_worker_started", interval_seconds=self._interval)
        while not self._stopped.is_set():
            await self.run_once()
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval)
        self._log.info("sweep_worker_stopped", sweeps=self.sweeps_completed)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Apply due automatic governance phase transitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL_SECONDS,
        help="Seconds between sweeps (default: 300)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sweep and exit",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create governance tables before sweeping",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port",
    )
    parser.add_argument(
        "--environment",
        type=str,
        default=None,
        help="Logging environment: production (JSON) or development",
    )
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> None:
    session_factory = get_session_factory()
    try:
        if args.create_schema:
            await create_schema(session_factory)
            logger.info("governance_schema_ready")

        if args.metrics_port is not None:
            start_http_server(
                args.metrics_port,
                registry=get_governance_metrics_collector().get_registry(),
            )
            logger.info("metrics_server_started", port=args.metrics_port)

        core = build_postgres_core(session_factory=session_factory)
        worker = TransitionSweepWorker(core.scheduler, interval_seconds=args.interval)

        if args.once:
            await worker.run_once()
            return

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, worker.stop)
        await worker.run()
    finally:
        await close_database_engine()


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    configure_structlog(args.environment)
    try:
        asyncio.run(_run(args))
    except ValueError as exc:
        # Missing DATABASE_URL or invalid GOVERNANCE_* settings
        logger.error("sweep_worker_misconfigured", error=str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
