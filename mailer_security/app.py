"""
Mailer API Application
======================
FastAPI app with HMAC authentication installed in front of every route.

Public endpoints live under ``/api/v1/public`` and are matched by the default
public path pattern; everything else needs a signed request.

Run locally:
    API_SECURITY_SECRET_KEY=... uvicorn mailer_security.app:create_app --factory
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, FastAPI, Request
import structlog

from . import __version__
from .envelope import ApiEnvelope
from .logging_config import setup_logging, shutdown_logging
from .hmac_auth import (
    ACCESS_KEY_HEADER,
    PROJECT_TOKEN_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    HmacAuthMiddleware,
    SecurityPolicy,
)

logger = structlog.get_logger(__name__)

SERVICE_NAME = "mailer-service"


def create_public_router(policy: SecurityPolicy, service_name: str = SERVICE_NAME) -> APIRouter:
    """
    Create the router for endpoints that need no signature.

    Returns:
        FastAPI router with /health, /status and /info under /api/v1/public
    """
    router = APIRouter(prefix="/api/v1/public", tags=["Public"])

    @router.get("/health")
    async def health():
        """Liveness check for load balancers and monitoring."""
        return ApiEnvelope.ok({
            "status": "UP",
            "service": service_name,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }).to_content()

    @router.get("/status")
    async def status():
        """Service status with feature flags."""
        return ApiEnvelope.ok({
            "service": service_name,
            "version": __version__,
            "status": "RUNNING",
            "features": {
                "hmac_authentication": policy.enabled,
                "public_apis": True,
            },
            "endpoints": {
                "auth_verify": "/api/v1/auth/verify",
                "health_check": "/api/v1/public/health",
                "service_status": "/api/v1/public/status",
            },
        }).to_content()

    @router.get("/info")
    async def info():
        """Authentication requirements for API clients."""
        return ApiEnvelope.ok({
            "version": "v1",
            "authentication": {
                "type": "HMAC-SHA512",
                "signed_message": "timestamp + project_token",
                "timestamp_tolerance_seconds": policy.tolerance_seconds,
                "required_headers": [
                    ACCESS_KEY_HEADER,
                    TIMESTAMP_HEADER,
                    PROJECT_TOKEN_HEADER,
                    SIGNATURE_HEADER,
                ],
                "public_paths": list(policy.public_paths),
            },
        }).to_content()

    return router


def create_auth_router() -> APIRouter:
    """Router for protected endpoints."""
    router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

    @router.get("/verify")
    async def verify(request: Request):
        """Echo the caller's access key once the signature has been accepted."""
        return ApiEnvelope.ok({
            "authenticated": True,
            "access_key": request.headers.get(ACCESS_KEY_HEADER),
        }).to_content()

    return router


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Flush queued log records before the process exits
    shutdown_logging()


def create_app(
    policy: Optional[SecurityPolicy] = None,
    configure_logging: bool = True,
    log_level: str = "INFO",
) -> FastAPI:
    """
    Build the application.

    Args:
        policy: Security policy; loaded from the environment when omitted
        configure_logging: Install queue-backed structured logging for the service
        log_level: Root log level used when logging is configured

    Returns:
        FastAPI application
    """
    if configure_logging:
        setup_logging(service_name=SERVICE_NAME, level=log_level)

    if policy is None:
        policy = SecurityPolicy.from_env()

    app = FastAPI(title="Mailer API", version=__version__, lifespan=lifespan)
    app.add_middleware(HmacAuthMiddleware, policy=policy)
    app.include_router(create_public_router(policy))
    app.include_router(create_auth_router())

    logger.info("app_created", service=SERVICE_NAME, security_enabled=policy.enabled)
    return app
