# -*- coding: utf-8 -*-
"""
Polling of a submitted job until it is done or the retry budget is spent.

The delay between two checks follows a capped Fibonacci-like schedule. The
schedule is plain data so it can be tuned from the configuration.
"""

import time
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from .errors import RemoteTransportError
from .models import Job, JobStatus

# Seconds to wait before the next check, indexed by attempt
DEFAULT_BACKOFF_SCHEDULE = (
    1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89,
    144, 144, 144, 144,
    233, 233, 233, 233, 233,
)


class PollOutcome(str, Enum):
    DONE = 'done'
    TIMED_OUT = 'timed_out'
    FAILED = 'failed'


@dataclass(frozen=True)
class PollResult:
    final_status: Optional[JobStatus]
    elapsed: float
    attempts: int
    outcome: PollOutcome


class JobPoller:
    """
    Wait for a job to reach the Done status.

    A Failed job keeps being polled like a pending one unless `stop_on_failed`
    is set. Timeout is reported through `PollOutcome.TIMED_OUT`, never raised.
    """

    def __init__(
        self,
        client,
        schedule: Sequence[float] = DEFAULT_BACKOFF_SCHEDULE,
        stop_on_failed: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        if not schedule:
            raise ValueError("Backoff schedule must contain at least one delay.")
        if any(delay < 0 for delay in schedule):
            raise ValueError("Backoff delays must be positive or zero.")
        self.client = client
        self.schedule = tuple(schedule)
        self.stop_on_failed = stop_on_failed
        self._sleep = sleep
        self._clock = clock

    @property
    def max_attempts(self) -> int:
        return len(self.schedule)

    def await_terminal(self, job: Job, label: Optional[str] = None) -> PollResult:
        """
        Poll `job` until it is done or the schedule is exhausted.

        Args:
            job (Job): The submitted job.
            label (str): Name used in log messages, defaults to the job UUID.

        Returns:
            PollResult: Last known status, elapsed seconds since the first
                check, number of sleeps performed, and outcome.

        Raises:
            RemoteError: If the very first status check fails. Transport
                errors on later checks count as "not done yet".
        """
        label = label or job.uuid
        t0 = self._clock()
        attempt = 0
        status = None

        while True:
            try:
                status = self.client.retrieve_job(job.uuid).status
            except RemoteTransportError as e:
                if attempt == 0:
                    raise
                logging.warning(f'"{label}" - Unable to get status for task "{job.uuid}": {e}')

            if status == JobStatus.DONE:
                return PollResult(status, self._clock() - t0, attempt, PollOutcome.DONE)

            if status == JobStatus.FAILED and self.stop_on_failed:
                logging.warning(f'"{label}" - Task "{job.uuid}" failed')
                return PollResult(status, self._clock() - t0, attempt, PollOutcome.FAILED)

            if attempt >= self.max_attempts:
                logging.warning(f'"{label}" - Unable to get result after {attempt} iterations for task "{job.uuid}"')
                return PollResult(status, self._clock() - t0, attempt, PollOutcome.TIMED_OUT)

            delay = self.schedule[attempt]
            status_name = status.name if status is not None else 'unknown'
            logging.debug(f'"{label}" - Task status {status_name}, next check in {delay}s')
            self._sleep(delay)
            attempt += 1
