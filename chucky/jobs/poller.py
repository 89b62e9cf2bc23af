import logging
import time
from enum import Enum
from typing import Callable

from chucky.common.errors import JobTimeoutError
from chucky.common.models.jobs import Job, JobStatus
from chucky.common.models.options import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT


class PollState(str, Enum):
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    TIMED_OUT = "TIMED_OUT"


TERMINAL_POLL_STATES = {
    JobStatus.COMPLETED.value: PollState.COMPLETED,
    JobStatus.FAILED.value: PollState.FAILED,
    JobStatus.CANCELED.value: PollState.CANCELED,
}


class CompletionPoller:
    """
    Waits for a submitted job to reach a terminal status.

    The first status check happens immediately, then once every `poll_interval`
    seconds until the job completes or `timeout` seconds have passed since
    wait() started. Timing out only ends the local wait; the remote job keeps
    running. `clock` and `sleep` are injectable so the loop can be driven
    without real delays.
    """

    def __init__(
        self,
        fetch_job: Callable[[str], Job],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetch_job = fetch_job
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep
        self.state = PollState.SUBMITTED
        self.fetches = 0
        self.logger = logging.getLogger("chucky.poller")

    def wait(self, job_id: str) -> Job:
        self.state = PollState.POLLING
        self.fetches = 0
        start = self.clock()

        while self.clock() - start < self.timeout:
            job = self.fetch_job(job_id)
            self.fetches += 1

            if job.is_completed:
                # Unknown terminal statuses still end the wait; report them as failures
                self.state = TERMINAL_POLL_STATES.get(job.status, PollState.FAILED)
                self.logger.info(f"Job {job_id} finished as {job.status} after {self.fetches} checks",
                                 extra={"event": "job_finished", "job_id": job_id})
                return job

            self.logger.debug(f"Job {job_id} still {job.status}", extra={"event": "job_poll", "job_id": job_id})
            self.sleep(self.poll_interval)

        self.state = PollState.TIMED_OUT
        self.logger.warning(f"Gave up waiting for job {job_id} after {self.timeout}s",
                            extra={"event": "job_timeout", "job_id": job_id})
        raise JobTimeoutError(job_id, self.timeout)
