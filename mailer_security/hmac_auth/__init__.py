"""
HMAC Authentication Module
==========================
Stateless HMAC-SHA512 request signing, verification and middleware.
"""

# Re-export all public APIs
from .models import (
    AuthDecision,
    AuthRejection,
    AuthVia,
    ErrorCode,
    SignedRequest,
    VerificationOutcome,
)
from .signature import (
    canonical_message,
    compute_signature,
    constant_time_equals,
    verify_signature,
    InvalidSignatureInput,
    SIGNATURE_ALGORITHM,
)
from .timestamp import (
    current_millis,
    is_timestamp_valid,
    parse_timestamp,
    DEFAULT_TOLERANCE_SECONDS,
)
from .path_matcher import match_path, find_public_pattern, is_public_path
from .policy import SecurityPolicy, SecurityConfigError, DEFAULT_PUBLIC_PATHS
from .headers import (
    ACCESS_KEY_HEADER,
    TIMESTAMP_HEADER,
    SIGNATURE_HEADER,
    PROJECT_TOKEN_HEADER,
    create_signed_headers,
    extract_signed_request,
    get_client_ip,
)
from .verifier import verify_request
from .responder import (
    build_error_response,
    error_message,
    error_status,
    security_error_response,
    GENERIC_MESSAGE,
)
from .middleware import HmacAuthMiddleware, create_hmac_auth_middleware

__all__ = [
    # Models
    "AuthDecision",
    "AuthRejection",
    "AuthVia",
    "ErrorCode",
    "SignedRequest",
    "VerificationOutcome",
    # Signature
    "canonical_message",
    "compute_signature",
    "constant_time_equals",
    "verify_signature",
    "InvalidSignatureInput",
    "SIGNATURE_ALGORITHM",
    # Timestamp
    "current_millis",
    "is_timestamp_valid",
    "parse_timestamp",
    "DEFAULT_TOLERANCE_SECONDS",
    # Path matching
    "match_path",
    "find_public_pattern",
    "is_public_path",
    # Policy
    "SecurityPolicy",
    "SecurityConfigError",
    "DEFAULT_PUBLIC_PATHS",
    # Headers
    "ACCESS_KEY_HEADER",
    "TIMESTAMP_HEADER",
    "SIGNATURE_HEADER",
    "PROJECT_TOKEN_HEADER",
    "create_signed_headers",
    "extract_signed_request",
    "get_client_ip",
    # Verification
    "verify_request",
    # Responses
    "build_error_response",
    "error_message",
    "error_status",
    "security_error_response",
    "GENERIC_MESSAGE",
    # Middleware
    "HmacAuthMiddleware",
    "create_hmac_auth_middleware",
]
