import copy
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel


class JobStatus(str, Enum):
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED.value, JobStatus.FAILED.value, JobStatus.CANCELED.value})


class CamelModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Execution request ---

class OutputFormat(BaseModel):
    type: str = "json_schema"
    schema_: Dict[str, Any] = Field(..., alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class Callback(CamelModel):
    url: str
    secret: Optional[str] = None


class RequestOptions(CamelModel):
    token: str
    model: str
    system_prompt: Optional[str] = None
    max_turns: Optional[int] = None
    output_format: Optional[OutputFormat] = None
    tools: Optional[Any] = None
    allowed_tools: Optional[List[str]] = None
    disallowed_tools: Optional[List[str]] = None
    permission_mode: Optional[str] = None
    allow_dangerously_skip_permissions: Optional[bool] = None


class JobRequest(CamelModel):
    message: str = Field(..., min_length=1)
    idempotency_key: str
    options: RequestOptions
    ttl: Optional[int] = None
    callback: Optional[Callback] = None

    def to_payload(self) -> Dict[str, Any]:
        # Unset optionals toggle remote behaviour, so they must be absent, not null
        payload = self.model_dump(by_alias=True, exclude_none=True)
        # tools given as JSON null is forwarded as null
        if "tools" in self.options.model_fields_set and self.options.tools is None:
            payload["options"]["tools"] = None
        return payload


class IncubateResponse(CamelModel):
    vessel_id: Optional[str] = None
    idempotency_key: Optional[str] = None
    status: Optional[str] = None
    scheduled_for: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None


# --- Job records ---
# Output fields are written by the agent run and are not type-checked

class Usage(BaseModel):
    input_tokens: Any = None
    output_tokens: Any = None

    model_config = ConfigDict(extra="allow")


class SDKResult(BaseModel):
    type: Any = "result"
    subtype: Any = None # success, error_max_turns, error_during_execution, ...
    result: Any = None
    structured_output: Any = None
    total_cost_usd: Any = None
    usage: Optional[Usage] = None

    model_config = ConfigDict(extra="allow")


class IncubateOutput(BaseModel):
    success: Any = False
    text: Any = None
    result: Optional[SDKResult] = None
    error: Any = None

    model_config = ConfigDict(extra="allow")


class JobError(BaseModel):
    message: str
    name: Optional[str] = None


class Job(CamelModel):
    id: str
    status: str
    task_identifier: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    is_completed: Optional[bool] = None
    is_success: Optional[bool] = None
    is_failed: Optional[bool] = None
    output: Optional[IncubateOutput] = None
    error: Optional[JobError] = None

    model_config = ConfigDict(extra="allow")

    _raw_output: Any = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw_output(cls, data: Any, handler):
        job = handler(data)
        if isinstance(data, dict):
            job._raw_output = copy.deepcopy(data.get("output"))
        return job

    @property
    def raw_output(self) -> Any:
        """The `output` object exactly as the portal sent it."""
        return self._raw_output

    @model_validator(mode="after")
    def _derive_flags(self):
        # The portal normally sends these; fall back to the status when it doesn't
        if self.is_completed is None:
            self.is_completed = self.status in TERMINAL_STATUSES
        if self.is_success is None:
            self.is_success = self.status == JobStatus.COMPLETED.value
        if self.is_failed is None:
            self.is_failed = self.status == JobStatus.FAILED.value
        return self


class Project(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
