from typing import Optional


class ChuckyError(Exception):
    """Base class for every error raised by the chucky client."""


class ValidationError(ChuckyError):
    """Raised when required input is missing or malformed before any request is sent."""


class TransportError(ChuckyError):
    """Raised when an HTTP call fails (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class SubmissionError(ChuckyError):
    """The execution endpoint accepted the call but answered with an error payload."""


ExecutionError = SubmissionError


class JobTimeoutError(ChuckyError, TimeoutError):
    """
    The poller gave up waiting for a terminal status.
    The remote job keeps running; only the local wait ended.
    """

    def __init__(self, job_id: str, timeout: float):
        super().__init__(f"Job {job_id} did not complete within {_format_seconds(timeout)} seconds")
        self.job_id = job_id
        self.timeout = timeout


def _format_seconds(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
