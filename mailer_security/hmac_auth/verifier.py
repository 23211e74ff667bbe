"""
Request Verifier
================
Framework-independent decision logic for HMAC request authentication.

Steps run in a fixed order and stop at the first failure:

1. Policy disabled -> authenticated
2. Public path (or outside the protected prefix) -> authenticated
3. Required headers present and non-blank
4. Timestamp parses and lies within the tolerance window
5. Signature matches
"""

from typing import Mapping, Optional
import structlog

from .headers import extract_signed_request
from .models import AuthRejection, AuthVia, ErrorCode, VerificationOutcome
from .path_matcher import find_public_pattern
from .policy import SecurityPolicy
from .signature import verify_signature
from .timestamp import is_timestamp_valid

logger = structlog.get_logger(__name__)

SECURITY_ERROR_REASON = "Security validation failed"


def verify_request(
    policy: SecurityPolicy,
    path: str,
    headers: Mapping[str, str],
    now_millis: Optional[int] = None,
) -> VerificationOutcome:
    """
    Decide whether a request may reach the downstream handler.

    Never raises: unexpected faults become a SECURITY_ERROR rejection.

    Args:
        policy: Security policy loaded at startup
        path: Request path
        headers: Request headers (any case-insensitive or plain mapping)
        now_millis: Reference time for the replay window; defaults to now

    Returns:
        VerificationOutcome
    """
    try:
        return _verify(policy, path, headers, now_millis)
    except AuthRejection as rejection:
        return VerificationOutcome.rejected(rejection.code, rejection.reason)
    except Exception as e:
        logger.error(
            "hmac_auth_internal_error",
            path=path,
            error_type=type(e).__name__,
            exc_info=True,
        )
        return VerificationOutcome.rejected(ErrorCode.SECURITY_ERROR, SECURITY_ERROR_REASON)


def _verify(
    policy: SecurityPolicy,
    path: str,
    headers: Mapping[str, str],
    now_millis: Optional[int],
) -> VerificationOutcome:
    if not policy.enabled:
        return VerificationOutcome.authenticated(AuthVia.DISABLED)

    if not policy.is_protected_prefix(path):
        return VerificationOutcome.authenticated(AuthVia.UNPROTECTED_PREFIX)

    pattern = find_public_pattern(policy.public_paths, path)
    if pattern is not None:
        if policy.log_events:
            logger.debug("hmac_auth_public_path", path=path, pattern=pattern)
        return VerificationOutcome.authenticated(AuthVia.PUBLIC_PATH, matched_pattern=pattern)

    signed = extract_signed_request(headers, path)

    if not is_timestamp_valid(signed.timestamp_millis, policy.tolerance_seconds, now_millis):
        return VerificationOutcome.rejected(
            ErrorCode.INVALID_TIMESTAMP,
            "Request timestamp is too old or invalid",
            access_key=signed.access_key,
        )

    if not verify_signature(
        signed.timestamp_millis,
        signed.project_token,
        policy.secret_key,
        signed.provided_signature,
    ):
        return VerificationOutcome.rejected(
            ErrorCode.INVALID_SIGNATURE,
            "Invalid signature",
            access_key=signed.access_key,
        )

    return VerificationOutcome.authenticated(AuthVia.SIGNATURE, access_key=signed.access_key)
