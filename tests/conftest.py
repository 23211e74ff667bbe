"""
Shared fixtures for mailer_security tests.
"""

import logging

import pytest
import structlog
from fastapi import FastAPI
from starlette.requests import Request
from starlette.testclient import TestClient

from mailer_security.hmac_auth import (
    HmacAuthMiddleware,
    SecurityPolicy,
    create_signed_headers,
    current_millis,
)
from mailer_security.logging_config import shutdown_logging

SECRET_KEY = "s3cr3t-key-of-at-least-32-chars!!"
PROJECT_TOKEN = "proj123"
ACCESS_KEY = "L8YfR3ARc5058abc"


@pytest.fixture
def policy():
    return SecurityPolicy(secret_key=SECRET_KEY, detailed_errors=True)


@pytest.fixture
def signed_headers():
    """Factory for valid signed headers (optionally at a given timestamp)."""
    def _make(timestamp_millis=None, project_token=PROJECT_TOKEN, secret_key=SECRET_KEY):
        return create_signed_headers(
            access_key=ACCESS_KEY,
            project_token=project_token,
            secret_key=secret_key,
            timestamp_millis=timestamp_millis if timestamp_millis is not None else current_millis(),
        )
    return _make


class HandlerCounter:
    """Counts how often the downstream handler ran."""

    def __init__(self):
        self.calls = 0


def build_app(policy, counter=None):
    """Small app with one protected and one public route behind the middleware."""
    counter = counter or HandlerCounter()
    app = FastAPI()
    app.add_middleware(HmacAuthMiddleware, policy=policy)

    @app.get("/api/v1/emails")
    async def protected(request: Request):
        counter.calls += 1
        return {"ok": True, "access_key": request.headers.get("X-Access-Key")}

    @app.get("/api/v1/public/health")
    async def public():
        counter.calls += 1
        return {"status": "UP"}

    return app


@pytest.fixture
def counter():
    return HandlerCounter()


@pytest.fixture
def client(policy, counter):
    return TestClient(build_app(policy, counter))


@pytest.fixture
def restore_logging():
    """Put root handlers and structlog back the way the test found them."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    shutdown_logging()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
