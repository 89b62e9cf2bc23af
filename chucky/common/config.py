import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from chucky.common.errors import ValidationError

PORTAL_URL = "https://doting-hornet-490.convex.site"
WORKER_URL = "https://conjure.chucky.cloud"
API_KEY_PREFIX = "ak_live_"
DEFAULT_USER_ID = "chucky-sdk"

logger = logging.getLogger("chucky.config")


class ExecutionContext(BaseModel):
    """
    Everything a call needs to reach the service: credentials, hosts and timeouts.
    Built once per run and handed to every client; never mutated afterwards.
    """
    api_key: str
    portal_url: str = PORTAL_URL
    worker_url: str = WORKER_URL
    request_timeout: float = Field(60, gt=0)
    default_user_id: str = DEFAULT_USER_ID

    @field_validator("portal_url", "worker_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, api_key: Optional[str] = None, portal_url: Optional[str] = None,
                 worker_url: Optional[str] = None) -> "ExecutionContext":
        api_key = api_key or os.getenv("CHUCKY_API_KEY", "")
        if not api_key:
            raise ValidationError("No API key configured (set CHUCKY_API_KEY)")

        if not api_key.startswith(API_KEY_PREFIX):
            logger.warning(f"API key does not start with '{API_KEY_PREFIX}', continuing anyway",
                           extra={"event": "config"})

        return cls(
            api_key=api_key,
            portal_url=portal_url or os.getenv("CHUCKY_PORTAL_URL", PORTAL_URL),
            worker_url=worker_url or os.getenv("CHUCKY_WORKER_URL", WORKER_URL),
            request_timeout=float(os.getenv("CHUCKY_REQUEST_TIMEOUT", 60)),
            default_user_id=os.getenv("CHUCKY_USER_ID", DEFAULT_USER_ID),
        )

    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}
