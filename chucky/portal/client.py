import logging
from typing import Any, Dict, List, Optional

import pydantic
import requests

from chucky.common.config import ExecutionContext
from chucky.common.errors import TransportError
from chucky.common.models.jobs import Job, Project
from chucky.common.models.options import DEFAULT_LIST_LIMIT


class PortalClient:
    """
    Client for the Chucky portal API (project and job registry).
    Every call is a single bearer-authorized request; failures raise TransportError.
    """
    def __init__(self, context: ExecutionContext, session: Optional[requests.Session] = None):
        self.context = context
        self.base_url = context.portal_url
        self.session = session or requests.Session()
        # Sent per request; the session may be shared with other callers
        self.headers = context.auth_headers()
        self.logger = logging.getLogger("chucky.portal")

    def _request(self, method: str, path: str, body: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method, url, json=body, headers=self.headers, timeout=self.context.request_timeout
            )
            resp.raise_for_status()
            if not resp.content:
                return {}
            return resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            self.logger.error(f"{method} {path} failed with HTTP {status}", extra={"event": "portal_error"})
            raise TransportError(f"{method} {path} failed: {e}", status_code=status, url=url) from e
        except requests.exceptions.JSONDecodeError as e:
            raise TransportError(f"{method} {path} returned a non-JSON body", url=url) from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{method} {path} failed: {e}", extra={"event": "portal_error"})
            raise TransportError(f"{method} {path} failed: {e}", url=url) from e

    def list_projects(self) -> List[Project]:
        data = self._request("GET", "/api/projects")
        return [Project.model_validate(p) for p in data.get("projects", [])]

    def get_hmac_key(self, project_id: str) -> str:
        """Fetch the signing secret used to mint job tokens for a project."""
        data = self._request("POST", "/api/projects/hmac-key", {"projectId": project_id})
        return data.get("hmacKey", "")

    def get_job(self, job_id: str) -> Job:
        data = self._request("POST", "/api/jobs/get", {"jobId": job_id})
        if not data.get("job"):
            raise TransportError(f"Portal returned no record for job {job_id}", url=f"{self.base_url}/api/jobs/get")
        try:
            job = Job.model_validate(data["job"])
        except pydantic.ValidationError as e:
            self.logger.error(f"Unreadable record for job {job_id}", extra={"event": "portal_error", "job_id": job_id})
            raise TransportError(f"Portal returned an unreadable record for job {job_id}: {e}",
                                 url=f"{self.base_url}/api/jobs/get") from e
        self.logger.debug(f"Job {job_id} is {job.status}", extra={"event": "job_status", "job_id": job_id})
        return job

    def cancel_job(self, job_id: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/jobs/cancel", {"jobId": job_id})
        self.logger.info(f"Cancel requested for job {job_id}", extra={"event": "job_cancel", "job_id": job_id})
        return data

    def list_jobs(self, status: Optional[str] = None, limit: int = DEFAULT_LIST_LIMIT) -> Dict[str, Any]:
        body: Dict[str, Any] = {"size": limit or DEFAULT_LIST_LIMIT}
        if status:
            body["status"] = status
        return self._request("POST", "/api/jobs/list", body)
