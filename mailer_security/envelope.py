"""
Response Envelope
=================
Standard JSON envelope shared by every endpoint and by auth rejections.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiEnvelope(BaseModel):
    success: bool
    code: str
    message: str
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def ok(cls, data: Any = None) -> "ApiEnvelope":
        """Successful response carrying ``data``."""
        return cls(success=True, code="OK", message="Success", data=data)

    @classmethod
    def error(cls, code: str, message: str) -> "ApiEnvelope":
        """Failed response; ``data`` is always null."""
        return cls(success=False, code=code, message=message, data=None)

    def to_content(self) -> dict:
        """JSON-ready dict (timestamp rendered as ISO-8601)."""
        return self.model_dump(mode="json")
