"""
HMAC Auth Middleware
====================
Rejects API requests that do not carry a fresh, valid HMAC-SHA512 signature.

Usage (function form):
    from mailer_security.hmac_auth import SecurityPolicy, create_hmac_auth_middleware

    policy = SecurityPolicy.from_env()
    app.middleware("http")(create_hmac_auth_middleware(policy))

Usage (Starlette class):
    app.add_middleware(HmacAuthMiddleware, policy=policy)

Clients must send X-Access-Key, X-Timestamp, X-Project-Token and X-Access-Sign
(see ``create_signed_headers``).
"""

from typing import Awaitable, Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from ..masking import mask_access_key
from .headers import ACCESS_KEY_HEADER, get_client_ip, get_header
from .models import VerificationOutcome
from .policy import SecurityPolicy
from .responder import build_error_response, security_error_response
from .verifier import verify_request

logger = structlog.get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


def _remote_addr(request: Request) -> str:
    if request.client:
        return request.client.host
    return "unknown"


def _log_outcome(request: Request, outcome: VerificationOutcome) -> None:
    if outcome.is_authenticated:
        if outcome.access_key:
            logger.debug(
                "hmac_auth_passed",
                path=request.url.path,
                access_key=mask_access_key(outcome.access_key),
                client_ip=get_client_ip(request.headers, _remote_addr(request)),
            )
        return

    access_key = outcome.access_key or get_header(request.headers, ACCESS_KEY_HEADER)
    logger.warning(
        "hmac_auth_rejected",
        code=outcome.code.value,
        reason=outcome.reason,
        path=request.url.path,
        method=request.method,
        access_key=mask_access_key(access_key),
        client_ip=get_client_ip(request.headers, _remote_addr(request)),
    )


def create_hmac_auth_middleware(policy: SecurityPolicy) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """
    Build an ``(request, call_next) -> response`` middleware bound to ``policy``.

    The returned coroutine function can be registered with
    ``app.middleware("http")`` or called from any other middleware.
    """

    async def hmac_auth(request: Request, call_next: CallNext) -> Response:
        outcome = verify_request(policy, request.url.path, request.headers)

        try:
            if policy.log_events:
                _log_outcome(request, outcome)

            if not outcome.is_authenticated:
                return build_error_response(outcome, policy)
        except Exception as e:
            logger.error(
                "hmac_auth_response_error",
                path=request.url.path,
                error_type=type(e).__name__,
                exc_info=True,
            )
            return security_error_response(policy)

        # Handler errors are not authentication failures
        return await call_next(request)

    return hmac_auth


class HmacAuthMiddleware(BaseHTTPMiddleware):
    """
    Starlette middleware wrapper around ``create_hmac_auth_middleware``.

    The policy is fixed at construction; nothing is shared between requests.
    """

    def __init__(self, app, policy: SecurityPolicy):
        super().__init__(app)
        self.policy = policy
        self._handler = create_hmac_auth_middleware(policy)

        logger.info(
            "hmac_auth_middleware_configured",
            enabled=policy.enabled,
            public_paths=list(policy.public_paths),
            tolerance_seconds=policy.tolerance_seconds,
        )
        if not policy.enabled:
            logger.warning("hmac_auth_disabled", note="all requests pass without signature checks")

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        return await self._handler(request, call_next)
