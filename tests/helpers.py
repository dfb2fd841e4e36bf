"""
Test doubles shared across the test suite.
"""

from collections.abc import Callable
from typing import Any

import httpx
from apscheduler.jobstores.base import JobLookupError

FAKE_ID = "d3x0c1"
PING_API_KEY = "12345"
API_KEY = "1337hax0r"


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it handles."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder or (lambda request: httpx.Response(200))
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


class FakeJob:
    """Interval job registered with FakeScheduler."""

    def __init__(self, scheduler: "FakeScheduler", func: Callable[[], Any], interval: float, job_id: str) -> None:
        self.scheduler = scheduler
        self.func = func
        self.interval = interval
        self.id = job_id
        self.next_fire = scheduler.now + interval

    def remove(self) -> None:
        self.scheduler.remove_job(self.id)


class FakeScheduler:
    """Scheduler stand-in driven by simulated time."""

    running = True

    def __init__(self) -> None:
        self.now = 0.0
        self.jobs: dict[str, FakeJob] = {}

    def add_job(self, func: Callable[[], Any], trigger: Any = None, id: str | None = None, **kwargs: Any) -> FakeJob:
        job = FakeJob(self, func, trigger.interval.total_seconds(), id or str(len(self.jobs)))
        self.jobs[job.id] = job
        return job

    def remove_job(self, job_id: str, jobstore: str | None = None) -> None:
        if job_id not in self.jobs:
            raise JobLookupError(job_id)
        del self.jobs[job_id]

    def advance(self, seconds: float) -> None:
        """Move simulated time forward, firing every job that comes due."""
        target = self.now + seconds
        while True:
            due = [job for job in self.jobs.values() if job.next_fire <= target]
            if not due:
                break
            job = min(due, key=lambda j: j.next_fire)
            self.now = job.next_fire
            job.next_fire += job.interval
            job.func()
        self.now = target
