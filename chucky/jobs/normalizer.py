from typing import Any, Dict

from chucky.common.models.jobs import Job

# output.result field -> flat key
RESULT_FIELDS = {
    "subtype": "resultSubtype",
    "result": "resultText",
    "total_cost_usd": "totalCostUsd",
    "usage": "usage",
}


def normalize_job(job: Job) -> Dict[str, Any]:
    """
    Flatten a finished job into one record.

    Keys for nested output fields only appear when the field was actually sent,
    so `structuredOutput` is present for a schema result even if its value is
    falsy (0, False, {}, None).
    """
    record: Dict[str, Any] = {
        "jobId": job.id,
        "status": job.status,
        "isSuccess": job.is_success,
        "isFailed": job.is_failed,
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
        "startedAt": job.started_at,
        "finishedAt": job.finished_at,
    }

    output = job.output
    if output is not None:
        record["success"] = output.success
        if "text" in output.model_fields_set:
            record["text"] = output.text
        if "error" in output.model_fields_set:
            record["error"] = output.error

        result = output.result
        if result is not None:
            for attr, key in RESULT_FIELDS.items():
                if attr in result.model_fields_set:
                    value = getattr(result, attr)
                    record[key] = value.model_dump(exclude_unset=True) if attr == "usage" and value is not None else value
            if "structured_output" in result.model_fields_set:
                record["structuredOutput"] = result.structured_output

    record["rawOutput"] = job.raw_output
    return record
