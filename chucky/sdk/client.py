import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from chucky.auth.tokens import create_budget, create_token
from chucky.common.config import ExecutionContext
from chucky.common.errors import TransportError
from chucky.common.models.jobs import Job
from chucky.common.models.options import (
    DEFAULT_AI_BUDGET,
    DEFAULT_COMPUTE_BUDGET,
    CreateJobParams,
    ListOptions,
)
from chucky.jobs.builder import build_job_request
from chucky.jobs.normalizer import normalize_job
from chucky.jobs.poller import CompletionPoller
from chucky.jobs.submission import ExecutionClient
from chucky.portal.client import PortalClient


class ChuckyClient:
    """
    Client for creating and managing Chucky agent jobs.
    Supports job creation (optionally waiting for the result), lookup,
    cancellation, listing and project discovery.
    """
    def __init__(
        self,
        context: Optional[ExecutionContext] = None,
        portal: Optional[PortalClient] = None,
        executor: Optional[ExecutionClient] = None,
        session: Optional[requests.Session] = None,
        poller_factory: Optional[Callable[..., CompletionPoller]] = None,
    ):
        self.context = context or ExecutionContext.from_env()
        self.portal = portal or PortalClient(self.context, session=session)
        self.executor = executor or ExecutionClient(self.context)
        self.poller_factory = poller_factory or CompletionPoller
        self.logger = logging.getLogger("chucky.sdk")

    def create_job(self, params: CreateJobParams) -> Dict[str, Any]:
        """
        Submit a job. With wait_for_completion the call blocks until the job
        finishes and returns the flattened result; otherwise it returns the
        acceptance record straight away.
        """
        advanced = params.advanced_options

        # Tokens are minted per submission and never reused
        hmac_key = self.portal.get_hmac_key(params.project_id)
        token = create_token(
            user_id=advanced.user_id or self.context.default_user_id,
            project_id=params.project_id,
            secret=hmac_key,
            budget=create_budget(
                ai_dollars=advanced.ai_budget or DEFAULT_AI_BUDGET,
                compute_hours=advanced.compute_budget or DEFAULT_COMPUTE_BUDGET,
                window="day",
            ),
        )

        request = build_job_request(
            message=params.message,
            token=token,
            model_options=params.model_options,
            tool_options=params.tool_options,
            callback_options=params.callback_options,
            idempotency_key=advanced.idempotency_key,
            ttl=advanced.ttl,
        )
        accepted = self.executor.incubate(request)

        if not params.wait_for_completion:
            return {
                "jobId": accepted.vessel_id,
                "idempotencyKey": accepted.idempotency_key,
                "status": accepted.status,
                "scheduledFor": accepted.scheduled_for,
            }

        polling = params.polling_options
        poller = self.poller_factory(
            self.portal.get_job,
            poll_interval=polling.interval_seconds,
            timeout=polling.timeout_seconds,
        )
        job = poller.wait(accepted.vessel_id)
        return normalize_job(job)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        """Query the current record of a job."""
        job: Job = self.portal.get_job(job_id)
        return job.model_dump(by_alias=True, exclude_unset=True)

    def cancel_job(self, job_id: str) -> Dict[str, Any]:
        self.portal.cancel_job(job_id)
        return {"success": True, "jobId": job_id}

    def list_jobs(self, options: Optional[ListOptions] = None) -> Dict[str, Any]:
        options = options or ListOptions()
        return self.portal.list_jobs(status=options.status or None, limit=options.limit)

    def list_projects(self) -> List[Dict[str, Any]]:
        return [p.model_dump(by_alias=True) for p in self.portal.list_projects()]

    def project_options(self) -> List[Dict[str, Any]]:
        """
        Projects as name/value choices for a picker.
        Returns an empty list when the portal cannot be reached.
        """
        try:
            projects = self.portal.list_projects()
        except TransportError as e:
            self.logger.warning(f"Could not load projects: {e}", extra={"event": "projects_unavailable"})
            return []
        return [{"name": p.name, "value": p.id, "description": p.description} for p in projects]

    def verify_credentials(self) -> bool:
        """Check the API key by listing projects; raises TransportError when rejected."""
        self.portal.list_projects()
        return True
