"""
Error Responder
===============
Maps a rejected verification outcome to an HTTP response.

CRITICAL: Detailed reasons are only exposed when the policy enables
``detailed_errors``. The error code is always returned so clients can
branch on it.
"""

from datetime import datetime, timezone
from starlette.responses import JSONResponse

from ..envelope import ApiEnvelope
from .models import ErrorCode, VerificationOutcome
from .policy import SecurityPolicy
from .verifier import SECURITY_ERROR_REASON

GENERIC_MESSAGE = "Authentication failed"


def error_status(code: ErrorCode) -> int:
    """HTTP status for a rejection code; every authentication failure is a 401."""
    return 401


def error_message(outcome: VerificationOutcome, policy: SecurityPolicy) -> str:
    """Client-facing message: the detailed reason only when the policy allows it."""
    if policy.detailed_errors and outcome.reason:
        return outcome.reason
    return GENERIC_MESSAGE


def build_error_response(outcome: VerificationOutcome, policy: SecurityPolicy) -> JSONResponse:
    """
    Build the JSON error envelope for a rejected request.

    Args:
        outcome: Rejected verification outcome
        policy: Active security policy

    Returns:
        JSONResponse with status 401 and the standard envelope
    """
    code = outcome.code or ErrorCode.SECURITY_ERROR
    envelope = ApiEnvelope.error(code.value, error_message(outcome, policy))
    return JSONResponse(status_code=error_status(code), content=envelope.to_content())


def security_error_response(policy: SecurityPolicy) -> JSONResponse:
    """
    Fallback SECURITY_ERROR response used when building the normal one failed.

    Built from plain values only so it cannot fail the same way.
    """
    message = SECURITY_ERROR_REASON if policy.detailed_errors else GENERIC_MESSAGE
    return JSONResponse(
        status_code=error_status(ErrorCode.SECURITY_ERROR),
        content={
            "success": False,
            "code": ErrorCode.SECURITY_ERROR.value,
            "message": message,
            "data": None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
