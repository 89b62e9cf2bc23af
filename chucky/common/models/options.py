from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
CUSTOM_MODEL = "custom"

MODELS = {
    "Claude Sonnet 4.5": "claude-sonnet-4-5-20250929",
    "Claude Opus 4.5": "claude-opus-4-5-20251101",
    "Claude Haiku 3.5": "claude-3-5-haiku-20241022",
    "Custom": CUSTOM_MODEL,
}

DEFAULT_PERMISSION_MODE = "default"
BYPASS_PERMISSIONS = "bypassPermissions"

DEFAULT_AI_BUDGET = 10.0
DEFAULT_COMPUTE_BUDGET = 1.0
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_TIMEOUT = 600.0
DEFAULT_LIST_LIMIT = 25


class ModelOptions(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str = DEFAULT_MODEL
    custom_model: str = ""
    system_prompt: str = ""
    max_turns: int = 0 # 0 = unlimited
    output_format: Union[Dict[str, Any], str, None] = None # JSON schema, as object or JSON text


class ToolOptions(BaseModel):
    tools: str = "" # JSON array or comma-separated names
    allowed_tools: str = ""
    disallowed_tools: str = ""
    permission_mode: str = DEFAULT_PERMISSION_MODE


class CallbackOptions(BaseModel):
    callback_url: str = ""
    callback_secret: str = ""


class AdvancedOptions(BaseModel):
    user_id: str = ""
    idempotency_key: str = ""
    ttl: int = 0 # seconds to delay execution, 0 = immediate
    ai_budget: float = DEFAULT_AI_BUDGET
    compute_budget: float = DEFAULT_COMPUTE_BUDGET


class PollingOptions(BaseModel):
    polling_interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_POLL_TIMEOUT

    @property
    def interval_seconds(self) -> float:
        return self.polling_interval or DEFAULT_POLL_INTERVAL

    @property
    def timeout_seconds(self) -> float:
        return self.timeout or DEFAULT_POLL_TIMEOUT


class CreateJobParams(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    project_id: str = Field(..., description="Project the job runs in")
    message: str = Field(..., description="Prompt sent to the agent")
    wait_for_completion: bool = True
    polling_options: PollingOptions = Field(default_factory=PollingOptions)
    model_options: ModelOptions = Field(default_factory=ModelOptions)
    tool_options: ToolOptions = Field(default_factory=ToolOptions)
    callback_options: CallbackOptions = Field(default_factory=CallbackOptions)
    advanced_options: AdvancedOptions = Field(default_factory=AdvancedOptions)


class ListOptions(BaseModel):
    status: str = "" # empty = all statuses
    limit: int = DEFAULT_LIST_LIMIT


class JobIdParams(BaseModel):
    job_id: str = Field(..., min_length=1)
