import json
import logging
import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import pydantic

from chucky.common.errors import ValidationError
from chucky.common.models.jobs import Callback, JobRequest, OutputFormat, RequestOptions
from chucky.common.models.options import (
    BYPASS_PERMISSIONS,
    CUSTOM_MODEL,
    DEFAULT_MODEL,
    DEFAULT_PERMISSION_MODE,
    CallbackOptions,
    ModelOptions,
    ToolOptions,
)

IDEMPOTENCY_PREFIX = "chucky"

logger = logging.getLogger("chucky.builder")


class ParseKind(str, Enum):
    JSON = "json"
    CSV = "csv"
    EMPTY = "empty"


@dataclass(frozen=True)
class ParsedOption:
    """Outcome of reading a free-form option that may be JSON or a comma list."""
    kind: ParseKind
    value: Any = field(default=None)

    @property
    def is_set(self) -> bool:
        return self.kind is not ParseKind.EMPTY


def split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",")]


def parse_tool_list(raw: Optional[str]) -> ParsedOption:
    """
    Read a tools option. JSON wins when it decodes; anything else is treated
    as a human-typed comma list. The decoded JSON value is passed on untouched.
    """
    if not raw:
        return ParsedOption(ParseKind.EMPTY)
    try:
        return ParsedOption(ParseKind.JSON, json.loads(raw))
    except ValueError:
        return ParsedOption(ParseKind.CSV, split_csv(raw))


def parse_output_format(raw: Union[Dict[str, Any], str, None]) -> Optional[Dict[str, Any]]:
    """
    Returns the JSON schema object, or None when no schema should be requested.
    Malformed JSON never fails the submission; it just drops schema enforcement.
    """
    if not raw:
        return None
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.debug("Ignoring output format that is not valid JSON", extra={"event": "output_format_ignored"})
            return None
        if isinstance(parsed, dict):
            return parsed
        logger.debug(f"Ignoring output format of type {type(parsed).__name__}", extra={"event": "output_format_ignored"})
    return None


def resolve_model(options: ModelOptions) -> str:
    model = options.model or DEFAULT_MODEL
    if model == CUSTOM_MODEL and options.custom_model:
        return options.custom_model
    return model


def generate_idempotency_key(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{IDEMPOTENCY_PREFIX}-{now_ms}-{secrets.token_hex(4)}"


def build_job_request(
    message: str,
    token: str,
    model_options: Optional[ModelOptions] = None,
    tool_options: Optional[ToolOptions] = None,
    callback_options: Optional[CallbackOptions] = None,
    idempotency_key: str = "",
    ttl: int = 0,
) -> JobRequest:
    """
    Assemble the /incubate payload from raw option values.

    Optional fields are left as None when unset so JobRequest.to_payload()
    drops them; zero and unset numeric values are treated the same.
    """
    if not message or not message.strip():
        raise ValidationError("A message is required to create a job")

    model_options = model_options or ModelOptions()
    tool_options = tool_options or ToolOptions()
    callback_options = callback_options or CallbackOptions()

    schema = parse_output_format(model_options.output_format)
    tools = parse_tool_list(tool_options.tools)

    permission_mode = None
    skip_permissions = None
    if tool_options.permission_mode and tool_options.permission_mode != DEFAULT_PERMISSION_MODE:
        permission_mode = tool_options.permission_mode
        skip_permissions = permission_mode == BYPASS_PERMISSIONS

    callback = None
    if callback_options.callback_url:
        callback = Callback(url=callback_options.callback_url, secret=callback_options.callback_secret or None)

    option_fields: Dict[str, Any] = dict(
        token=token,
        model=resolve_model(model_options),
        system_prompt=model_options.system_prompt or None,
        max_turns=model_options.max_turns or None,
        output_format=OutputFormat(schema=schema) if schema else None,
        allowed_tools=split_csv(tool_options.allowed_tools) if tool_options.allowed_tools else None,
        disallowed_tools=split_csv(tool_options.disallowed_tools) if tool_options.disallowed_tools else None,
        permission_mode=permission_mode,
        allow_dangerously_skip_permissions=skip_permissions,
    )
    if tools.is_set:
        option_fields["tools"] = tools.value

    try:
        request = JobRequest(
            message=message,
            idempotency_key=idempotency_key or generate_idempotency_key(),
            options=RequestOptions(**option_fields),
            ttl=ttl if ttl and ttl > 0 else None,
            callback=callback,
        )
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid job request: {e}") from e

    logger.debug(f"Built job request {request.idempotency_key} for model {request.options.model}",
                 extra={"event": "request_built"})
    return request
