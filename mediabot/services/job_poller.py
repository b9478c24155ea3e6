"""Bounded-retry async job driver.

All remote waits (image-edit jobs, video conversions, OTP mailbox) go
through `poll_job()`:
  check status → Pending? sleep and retry → Completed / Failed / timeout
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mediabot.errors import UpstreamFailureError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class JobState(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobStatus:
    """Result of a single status check."""
    state: JobState
    payload: Any = None
    reason: str | None = None

    @classmethod
    def pending(cls, payload: Any = None) -> "JobStatus":
        return cls(JobState.PENDING, payload=payload)

    @classmethod
    def completed(cls, payload: Any) -> "JobStatus":
        return cls(JobState.COMPLETED, payload=payload)

    @classmethod
    def failed(cls, reason: str) -> "JobStatus":
        return cls(JobState.FAILED, reason=reason)

    @property
    def is_terminal(self) -> bool:
        return self.state is not JobState.PENDING


@dataclass(frozen=True)
class PollPolicy:
    """How often and how long to poll one job."""
    interval: float
    max_attempts: int
    backoff: float = 1.0
    max_interval: float | None = None
    deadline: float | None = None  # wall-clock seconds for the whole loop
    delay_first: bool = False

    def delay_for(self, attempt: int) -> float:
        """Delay before the given (0-based) attempt's follow-up poll."""
        delay = self.interval * (self.backoff ** attempt)
        if self.max_interval is not None:
            delay = min(delay, self.max_interval)
        return delay


async def poll_job(
    check: Callable[[], Awaitable[JobStatus]],
    policy: PollPolicy,
    *,
    label: str = "job",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Any:
    """Poll `check` until it reports a terminal status.

    Returns the Completed payload unmodified. Raises UpstreamFailureError
    with the remote reason on Failed, UpstreamTimeoutError once the attempt
    budget or the wall-clock deadline is exhausted.
    """
    if policy.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    started = clock()
    checks = 0

    for attempt in range(policy.max_attempts):
        if policy.delay_first or attempt > 0:
            delay = policy.delay_for(attempt if policy.delay_first else attempt - 1)
            if policy.deadline is not None and clock() - started + delay > policy.deadline:
                break
            await sleep(delay)

        status = await check()
        checks += 1

        if status.state is JobState.COMPLETED:
            logger.info("%s completed after %d poll(s)", label, checks)
            return status.payload
        if status.state is JobState.FAILED:
            logger.warning("%s failed: %s", label, status.reason)
            raise UpstreamFailureError(status.reason or f"{label} failed")

        logger.debug("%s pending (attempt %d/%d)", label, attempt + 1, policy.max_attempts)

    elapsed = clock() - started
    raise UpstreamTimeoutError(
        f"{label} timed out after {checks} attempt(s) ({elapsed:.0f}s)"
    )
