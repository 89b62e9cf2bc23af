import logging
import unittest
from unittest.mock import MagicMock

from chucky.common.errors import JobTimeoutError
from chucky.common.models.jobs import Job
from chucky.jobs.poller import CompletionPoller, PollState
from helpers import FakeClock, job_payload


def scripted_source(statuses):
    """fetch_job stand-in that walks through the given statuses, repeating the last one."""
    calls = []

    def fetch(job_id):
        status = statuses[min(len(calls), len(statuses) - 1)]
        calls.append(job_id)
        return Job.model_validate(job_payload(status, job_id=job_id))

    return fetch, calls


class TestCompletionPoller(unittest.TestCase):
    def setUp(self):
        logging.disable(logging.CRITICAL)
        self.clock = FakeClock()

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def make_poller(self, fetch, interval=5, timeout=600):
        return CompletionPoller(fetch, poll_interval=interval, timeout=timeout, clock=self.clock.clock, sleep=self.clock.sleep)

    def test_first_fetch_is_immediate(self):
        fetch, calls = scripted_source(["COMPLETED"])
        poller = self.make_poller(fetch)

        job = poller.wait("run_1")

        self.assertEqual(job.status, "COMPLETED")
        self.assertEqual(len(calls), 1)
        self.assertEqual(self.clock.sleeps, [])
        self.assertEqual(poller.state, PollState.COMPLETED)

    def test_n_pending_polls_then_terminal(self):
        for n in range(0, 6):
            self.clock = FakeClock()
            fetch, calls = scripted_source(["QUEUED"] * n + ["COMPLETED"])
            poller = self.make_poller(fetch, interval=2, timeout=600)

            job = poller.wait("run_n")

            self.assertTrue(job.is_completed)
            self.assertEqual(len(calls), n + 1)
            self.assertEqual(poller.fetches, n + 1)
            # Sleeps only between fetches, never after the terminal one
            self.assertEqual(self.clock.sleeps, [2] * n)

    def test_terminal_states_map_to_poll_states(self):
        for status, state in [("FAILED", PollState.FAILED), ("CANCELED", PollState.CANCELED)]:
            fetch, _ = scripted_source(["EXECUTING", status])
            poller = self.make_poller(fetch)
            job = poller.wait("run_x")
            self.assertEqual(job.status, status)
            self.assertEqual(poller.state, state)

    def test_timeout(self):
        fetch, calls = scripted_source(["EXECUTING"])
        poller = self.make_poller(fetch, interval=5, timeout=12)

        with self.assertRaises(JobTimeoutError) as ctx:
            poller.wait("run_slow")

        self.assertEqual(ctx.exception.job_id, "run_slow")
        self.assertEqual(ctx.exception.timeout, 12)
        self.assertIn("run_slow", str(ctx.exception))
        self.assertIn("12 seconds", str(ctx.exception))
        self.assertIsInstance(ctx.exception, TimeoutError)
        self.assertEqual(poller.state, PollState.TIMED_OUT)
        # Fetches at t=0, 5, 10; gives up within one interval of the deadline
        self.assertEqual(len(calls), 3)
        elapsed = self.clock.now - 1000.0
        self.assertGreaterEqual(elapsed, 12)
        self.assertLess(elapsed, 12 + 5)

    def test_deadline_counts_from_wait_start(self):
        self.clock.now = 50_000.0
        fetch, calls = scripted_source(["EXECUTING"])
        poller = self.make_poller(fetch, interval=1, timeout=3)

        with self.assertRaises(JobTimeoutError):
            poller.wait("run_late")
        self.assertEqual(len(calls), 3)

    def test_fetch_errors_propagate(self):
        fetch = MagicMock(side_effect=ConnectionError("down"))
        poller = self.make_poller(fetch)

        with self.assertRaises(ConnectionError):
            poller.wait("run_1")
        self.assertEqual(poller.state, PollState.POLLING)

    def test_status_derived_completion(self):
        # Records without the derived flags still end the loop on a terminal status
        fetch = MagicMock(return_value=Job.model_validate({"id": "run_2", "status": "CANCELED"}))
        poller = self.make_poller(fetch)

        job = poller.wait("run_2")
        self.assertTrue(job.is_completed)
        self.assertFalse(job.is_success)


if __name__ == '__main__':
    unittest.main()
