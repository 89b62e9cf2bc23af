import logging
from typing import Optional

import requests

from chucky.common.config import ExecutionContext
from chucky.common.errors import SubmissionError, TransportError
from chucky.common.models.jobs import IncubateResponse, JobRequest

GENERIC_FAILURE = "Failed to create job"


class ExecutionClient:
    """
    Posts job requests to the execution host.
    The job token travels inside the payload, so this session carries no bearer header.
    """
    def __init__(self, context: ExecutionContext, session: Optional[requests.Session] = None):
        self.context = context
        self.url = f"{context.worker_url}/incubate"
        self.session = session or requests.Session()
        self.logger = logging.getLogger("chucky.submission")

    def incubate(self, request: JobRequest) -> IncubateResponse:
        try:
            resp = self.session.post(self.url, json=request.to_payload(), timeout=self.context.request_timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise TransportError(f"POST /incubate failed: {e}", status_code=status, url=self.url) from e
        except requests.exceptions.JSONDecodeError as e:
            raise SubmissionError(GENERIC_FAILURE) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"POST /incubate failed: {e}", url=self.url) from e

        if not isinstance(data, dict):
            raise SubmissionError(GENERIC_FAILURE)

        if data.get("error") or data.get("message"):
            message = data.get("message") or data.get("error")
            self.logger.error(f"Submission {request.idempotency_key} rejected: {message}",
                              extra={"event": "submission_rejected"})
            raise SubmissionError(str(message))

        response = IncubateResponse.model_validate(data)
        if not response.vessel_id:
            raise SubmissionError(GENERIC_FAILURE)

        self.logger.info(f"Job {response.vessel_id} accepted ({response.status})",
                         extra={"event": "job_submitted", "job_id": response.vessel_id})
        return response
