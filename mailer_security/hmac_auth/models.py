"""
HMAC Auth Models
================
Data models and enums for HMAC request authentication.
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class AuthDecision(str, Enum):
    """Verification decision types."""
    AUTHENTICATED = "AUTHENTICATED"
    REJECTED = "REJECTED"


class ErrorCode(str, Enum):
    """Machine-readable codes returned to clients on rejection."""
    MISSING_ACCESS_KEY = "MISSING_ACCESS_KEY"
    MISSING_TIMESTAMP = "MISSING_TIMESTAMP"
    MISSING_SIGNATURE = "MISSING_SIGNATURE"
    MISSING_PROJECT_TOKEN = "MISSING_PROJECT_TOKEN"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    SECURITY_ERROR = "SECURITY_ERROR"


class AuthVia(str, Enum):
    """Why an authenticated request was let through."""
    DISABLED = "disabled"
    PUBLIC_PATH = "public_path"
    UNPROTECTED_PREFIX = "unprotected_prefix"
    SIGNATURE = "signature"


@dataclass(frozen=True)
class SignedRequest:
    """Signature material extracted from a single request's headers."""
    access_key: str
    timestamp_millis: int
    project_token: str
    provided_signature: str
    path: str


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of verifying one request."""
    decision: AuthDecision
    code: Optional[ErrorCode] = None
    reason: Optional[str] = None
    via: Optional[AuthVia] = None
    matched_pattern: Optional[str] = None
    access_key: Optional[str] = None

    @classmethod
    def authenticated(
        cls,
        via: AuthVia,
        matched_pattern: Optional[str] = None,
        access_key: Optional[str] = None,
    ) -> "VerificationOutcome":
        return cls(
            decision=AuthDecision.AUTHENTICATED,
            via=via,
            matched_pattern=matched_pattern,
            access_key=access_key,
        )

    @classmethod
    def rejected(
        cls,
        code: ErrorCode,
        reason: str,
        access_key: Optional[str] = None,
    ) -> "VerificationOutcome":
        return cls(
            decision=AuthDecision.REJECTED,
            code=code,
            reason=reason,
            access_key=access_key,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.decision == AuthDecision.AUTHENTICATED


class AuthRejection(Exception):
    """Raised inside verification to short-circuit with a rejection code."""

    def __init__(self, code: ErrorCode, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"{code.value}: {reason}")
