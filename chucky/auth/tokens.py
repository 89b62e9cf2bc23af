"""Budget-scoped job tokens, signed with the project's HMAC key."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
import pydantic
from pydantic import BaseModel, Field

from chucky.common.errors import ValidationError

TOKEN_ALGORITHM = "HS256"
TOKEN_EXPIRES_IN = 3600  # seconds
BUDGET_WINDOWS = ("hour", "day", "week", "month")


class Budget(BaseModel):
    ai_dollars: float = Field(10.0, gt=0)
    compute_hours: float = Field(1.0, gt=0)
    window: str = "day"

    def to_claim(self, now: datetime) -> Dict[str, Any]:
        """
        Encode the budget the way the service expects it inside a token:
        AI spend in micro-dollars, compute in seconds, window anchored at issue time.
        """
        return {
            "ai": int(round(self.ai_dollars * 1_000_000)),
            "compute": int(round(self.compute_hours * 3600)),
            "window": self.window,
            "windowStart": now.isoformat(),
        }


def create_budget(ai_dollars: float = 10.0, compute_hours: float = 1.0, window: str = "day") -> Budget:
    if window not in BUDGET_WINDOWS:
        raise ValidationError(f"Unsupported budget window: {window}")
    try:
        return Budget(ai_dollars=ai_dollars, compute_hours=compute_hours, window=window)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid budget: {e}") from e


def create_token(
    user_id: str,
    project_id: str,
    secret: str,
    budget: Budget,
    expires_in: int = TOKEN_EXPIRES_IN,
    now: Optional[datetime] = None,
) -> str:
    """
    Mint a short-lived job token.

    A fresh token is minted for every submission; callers must not cache it.
    """
    if not project_id:
        raise ValidationError("project_id is required to mint a token")
    if not secret:
        raise ValidationError(f"No signing key available for project {project_id}")

    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iss": project_id,
        "iat": issued,
        "exp": issued + timedelta(seconds=expires_in),
        "jti": uuid.uuid4().hex,
        "budget": budget.to_claim(issued),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, secret: str) -> Dict[str, Any]:
    """Verify and decode a token minted by create_token."""
    try:
        return jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.InvalidTokenError as e:
        raise ValidationError(f"Invalid token: {e}") from e
