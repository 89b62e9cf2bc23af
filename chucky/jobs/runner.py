import logging
from typing import Any, Dict, Iterable, List

import pydantic

from chucky.common.errors import ValidationError
from chucky.common.models.options import CreateJobParams, JobIdParams, ListOptions
from chucky.sdk.client import ChuckyClient

OPERATIONS = ("create", "get", "cancel", "list")


class JobRunner:
    """
    Runs a batch of job operations one item at a time.

    Each item is a dict with an "operation" key plus that operation's
    parameters. By default the first failure aborts the batch; with
    continue_on_fail the failure is recorded against the item's index and
    processing moves on.
    """
    def __init__(self, client: ChuckyClient):
        self.client = client
        self.logger = logging.getLogger("chucky.runner")

    def execute(self, items: Iterable[Dict[str, Any]], continue_on_fail: bool = False) -> List[Dict[str, Any]]:
        results = []
        for index, item in enumerate(items):
            try:
                results.append(self.run_item(item))
            except Exception as e:
                if not continue_on_fail:
                    raise
                self.logger.warning(f"Item {index} failed: {e}", extra={"event": "item_failed"})
                results.append({"error": str(e), "pairedItem": {"item": index}})
        return results

    def run_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(item)
        operation = params.pop("operation", "create")
        if operation not in OPERATIONS:
            raise ValidationError(f"Unknown operation: {operation}")

        try:
            if operation == "create":
                return self.client.create_job(CreateJobParams.model_validate(params))
            if operation == "get":
                return self.client.get_job(JobIdParams.model_validate(params).job_id)
            if operation == "cancel":
                return self.client.cancel_job(JobIdParams.model_validate(params).job_id)
            return self.client.list_jobs(ListOptions.model_validate(params))
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid parameters for {operation}: {e}") from e
