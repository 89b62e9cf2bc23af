from unittest.mock import MagicMock

import requests


def make_response(payload=None, status_code=200):
    """A stand-in for requests.Response carrying a JSON payload."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.content = b"" if payload is None else b"{...}"
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Error", response=resp)
        resp.raise_for_status.side_effect = error
    return resp


class FakeClock:
    """Manual clock: time only moves when sleep() is called."""
    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []

    def clock(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def job_payload(status, job_id="run_123", **extra):
    terminal = status in ("COMPLETED", "FAILED", "CANCELED")
    job = {
        "id": job_id,
        "status": status,
        "taskIdentifier": "incubate",
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T00:00:05Z",
        "isCompleted": terminal,
        "isSuccess": status == "COMPLETED",
        "isFailed": status == "FAILED",
    }
    if terminal:
        job["startedAt"] = "2025-01-01T00:00:01Z"
        job["finishedAt"] = "2025-01-01T00:00:05Z"
    job.update(extra)
    return job
