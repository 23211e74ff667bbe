"""
Mailer Security
===============
HMAC request authentication for the mailer API.
"""

__version__ = "1.0.0"

from mailer_security.hmac_auth import (
    SecurityPolicy,
    SecurityConfigError,
    HmacAuthMiddleware,
    create_hmac_auth_middleware,
    verify_request,
    compute_signature,
    verify_signature,
    create_signed_headers,
    ErrorCode,
    VerificationOutcome,
)
from mailer_security.envelope import ApiEnvelope
from mailer_security.logging_config import setup_logging, shutdown_logging

__all__ = [
    "SecurityPolicy",
    "SecurityConfigError",
    "HmacAuthMiddleware",
    "create_hmac_auth_middleware",
    "verify_request",
    "compute_signature",
    "verify_signature",
    "create_signed_headers",
    "ErrorCode",
    "VerificationOutcome",
    "ApiEnvelope",
    "setup_logging",
    "shutdown_logging",
]
