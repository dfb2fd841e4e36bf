"""
Heartbeat Aggregator

Batches frequent tick/error signals from a long-running process into one
tick ping per interval.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

import structlog
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from cronitor_client.config import (
    ClientSettings,
    HeartbeatConfig,
    effective_interval,
    require_monitor_id,
)
from cronitor_client.config import settings as default_settings
from cronitor_client.errors import TransportError
from cronitor_client.ping import Ping

logger = structlog.get_logger(__name__)


class HeartbeatStatus(str, Enum):
    """Lifecycle of a heartbeat. RUNNING is initial, STOPPED is terminal."""

    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class HeartbeatState:
    """Counters accumulated since the last flush."""

    tick_count: int = 0
    error_count: int = 0

    @property
    def has_pending(self) -> bool:
        """Whether any ticks or errors are waiting to be reported."""
        return self.tick_count > 0 or self.error_count > 0

    def take(self) -> tuple[int, int]:
        """Return the current counts and reset both to zero."""
        snapshot = (self.tick_count, self.error_count)
        self.tick_count = 0
        self.error_count = 0
        return snapshot


class Heartbeat:
    """
    Aggregates ticks and errors and reports them on a fixed interval.

    Every interval the counts gathered since the previous report are sent
    as a single `tick` ping carrying count, error_count and duration. The
    counters are reset before the request is dispatched, so a failed
    request loses that interval's counts; nothing is retried.

    The interval job runs on an APScheduler BackgroundScheduler. Pass a
    scheduler to share one between many heartbeats; otherwise the heartbeat
    creates its own and shuts it down on stop().

    Usage:
        heartbeat = Heartbeat("d3x0c1", interval_seconds=30)
        for item in queue:
            try:
                process(item)
                heartbeat.tick()
            except Exception:
                heartbeat.error()
        heartbeat.stop()
    """

    def __init__(
        self,
        monitor_id: str | Mapping[str, Any] | HeartbeatConfig | None = None,
        *,
        interval_seconds: int | None = None,
        api_key: str | None = None,
        settings: ClientSettings | None = None,
        ping: Ping | None = None,
        scheduler: BaseScheduler | None = None,
        clamp_counts: bool = False,
    ) -> None:
        """
        Initialize the heartbeat and start its interval job.

        Args:
            monitor_id: Monitor code, or a mapping/HeartbeatConfig carrying
                monitor_id, interval_seconds and api_key
            interval_seconds: Flush interval; defaults to 60, floored at 10
            api_key: Auth key forwarded to the ping client
            settings: Client settings, defaults to the environment-driven settings
            ping: Optional ping client (for dependency injection in tests)
            scheduler: Optional shared scheduler; the caller starts and stops it
            clamp_counts: Keep counters from going below zero on negative input

        Raises:
            ConfigurationError: If no monitor id is supplied
        """
        config = HeartbeatConfig.coerce(monitor_id)
        self.monitor_id = require_monitor_id(
            config.monitor_id, "You must initialize Heartbeat with a monitorId."
        )
        self._settings = settings or default_settings
        self.interval_seconds = effective_interval(
            interval_seconds or config.interval_seconds,
            self._settings.heartbeat_interval_seconds,
        )
        self.clamp_counts = clamp_counts
        self.state = HeartbeatState()

        self._lock = threading.Lock()
        self._owns_ping = ping is None
        if ping is None:
            ping = Ping(self.monitor_id, api_key=api_key or config.api_key, settings=self._settings)
        self._ping = ping

        self._owns_scheduler = scheduler is None
        self._scheduler = self._create_scheduler() if scheduler is None else scheduler
        self.status = HeartbeatStatus.RUNNING
        self._job: Job | None = self._scheduler.add_job(
            self._flush,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=f"heartbeat:{self.monitor_id}:{uuid4().hex[:8]}",
            name=f"heartbeat:{self.monitor_id}",
        )
        if self._owns_scheduler:
            self._scheduler.start()

        logger.info(
            "Heartbeat started",
            monitor_id=self.monitor_id,
            interval_seconds=self.interval_seconds,
        )

    def _create_scheduler(self) -> BackgroundScheduler:
        """Create the scheduler used when none is injected."""
        return BackgroundScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={
                "coalesce": True,  # Combine missed runs into one
                "max_instances": 1,
            },
            timezone="UTC",
        )

    @property
    def job(self) -> Job | None:
        """The interval job driving flushes, None once stopped."""
        return self._job

    @property
    def is_running(self) -> bool:
        return self.status == HeartbeatStatus.RUNNING

    @property
    def ping(self) -> Ping:
        return self._ping

    def tick(self, count: int = 1) -> None:
        """Record `count` successful units. No network call is made."""
        with self._lock:
            self.state.tick_count += count
            if self.clamp_counts and self.state.tick_count < 0:
                self.state.tick_count = 0

    def error(self, count: int = 1) -> None:
        """Record `count` failed units. No network call is made."""
        with self._lock:
            self.state.error_count += count
            if self.clamp_counts and self.state.error_count < 0:
                self.state.error_count = 0

    def stop(self) -> None:
        """
        Cancel the interval job and report any pending counts.

        Safe to call repeatedly. Counts recorded after a previous stop()
        are reported by the next stop() or flush(). A ping client created
        by the heartbeat is closed once the trailing report settles.
        """
        self._halt()
        self._close_ping()

    def _halt(self) -> None:
        with self._lock:
            job = self._job
            self._job = None
            self.status = HeartbeatStatus.STOPPED
            pending = self.state.has_pending

        if job is not None:
            self._cancel(job)
            logger.info("Heartbeat stopped", monitor_id=self.monitor_id)

        if pending:
            self.flush()

    def _cancel(self, job: Job) -> None:
        try:
            job.remove()
        except JobLookupError:
            logger.debug("Heartbeat job already removed", monitor_id=self.monitor_id)

        if self._owns_scheduler and self._scheduler.running:
            # stop() may run on the scheduler's own worker thread
            self._scheduler.shutdown(wait=False)

    def _close_ping(self) -> None:
        if self._owns_ping:
            self._ping.close()

    def fail(self, message: str | None = None) -> bool:
        """
        Stop the heartbeat and report an abnormal termination.

        The fail ping is sent directly and is independent of the error()
        tally. A transport failure is logged, not raised.

        Returns:
            True if the fail ping was delivered
        """
        self._halt()
        try:
            self._ping.fail(message)
        except TransportError as e:
            logger.warning("Heartbeat fail ping lost", monitor_id=self.monitor_id, error=str(e))
            return False
        finally:
            self._close_ping()
        return True

    def flush(self) -> bool:
        """
        Report the counts accumulated since the last flush.

        Both counters are reset before the request is sent. On a transport
        failure the counts are dropped and the failure is logged.

        Returns:
            True if the tick ping was delivered
        """
        with self._lock:
            count, error_count = self.state.take()
        return self._report(count, error_count)

    def _flush(self) -> None:
        """Interval job callback. Does nothing once the heartbeat is stopped."""
        with self._lock:
            if self.status != HeartbeatStatus.RUNNING:
                return
            count, error_count = self.state.take()
        self._report(count, error_count)

    def _report(self, count: int, error_count: int) -> bool:
        try:
            self._ping.tick(count=count, error_count=error_count, duration=self.interval_seconds)
        except TransportError as e:
            logger.warning(
                "Heartbeat flush lost",
                monitor_id=self.monitor_id,
                count=count,
                error_count=error_count,
                error=str(e),
            )
            return False

        logger.debug(
            "Heartbeat flushed",
            monitor_id=self.monitor_id,
            count=count,
            error_count=error_count,
        )
        return True

    def __enter__(self) -> Heartbeat:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.stop()
        else:
            self.fail(str(exc) or exc_type.__name__)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__}(monitor_id={self.monitor_id!r}, "
            f"interval_seconds={self.interval_seconds}, status={self.status.value})>"
        )
