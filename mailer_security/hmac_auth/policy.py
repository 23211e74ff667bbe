"""
Security Policy
===============
Immutable configuration for HMAC request authentication.

Build one policy at startup (usually with ``SecurityPolicy.from_env()``) and
pass it into the middleware. It is never mutated afterwards.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple
import structlog

from .timestamp import DEFAULT_TOLERANCE_SECONDS

logger = structlog.get_logger(__name__)

ENV_PREFIX = "API_SECURITY_"
MIN_SECRET_KEY_LENGTH = 32

DEFAULT_PUBLIC_PATHS: Tuple[str, ...] = (
    "/api/v1/public/**",
    "/api/v1/health",
    "/api/v1/status",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SecurityConfigError(ValueError):
    """Raised when the security policy is invalid."""


@dataclass(frozen=True)
class SecurityPolicy:
    """Process-wide HMAC authentication settings."""
    secret_key: str = field(default="", repr=False)
    enabled: bool = True
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS
    public_paths: Tuple[str, ...] = DEFAULT_PUBLIC_PATHS
    log_events: bool = True
    detailed_errors: bool = False
    # Only paths under this prefix are checked; None protects everything
    protected_prefix: Optional[str] = None

    def __post_init__(self):
        # Accept any sequence but store a tuple
        object.__setattr__(self, "public_paths", tuple(self.public_paths))
        self.validate()

    def validate(self) -> None:
        """
        Check the policy for configuration mistakes.

        Raises:
            SecurityConfigError: If the policy cannot be used
        """
        if isinstance(self.tolerance_seconds, bool) or not isinstance(self.tolerance_seconds, int):
            raise SecurityConfigError("Timestamp tolerance must be an integer number of seconds")
        if self.tolerance_seconds <= 0:
            raise SecurityConfigError("Timestamp tolerance must be positive")
        if any(not p for p in self.public_paths):
            raise SecurityConfigError("Public path patterns cannot be empty")

        if not self.enabled:
            return

        if not self.secret_key or not self.secret_key.strip():
            raise SecurityConfigError("Secret key is required when security is enabled")
        if len(self.secret_key) < MIN_SECRET_KEY_LENGTH:
            logger.warning(
                "security_secret_key_too_short",
                length=len(self.secret_key),
                recommended=MIN_SECRET_KEY_LENGTH,
            )

    def is_protected_prefix(self, path: str) -> bool:
        """Return True if ``path`` falls under the protected prefix (if any)."""
        if not self.protected_prefix:
            return True
        return path.startswith(self.protected_prefix)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
    ) -> "SecurityPolicy":
        """
        Load the policy from environment variables.

        Variables (with the default prefix):
            API_SECURITY_ENABLED: "true"/"false" (default true)
            API_SECURITY_SECRET_KEY: shared secret
            API_SECURITY_TIMESTAMP_TOLERANCE: seconds (default 300)
            API_SECURITY_PUBLIC_PATHS: comma-separated glob patterns
            API_SECURITY_LOG_SECURITY_EVENTS: "true"/"false" (default true)
            API_SECURITY_DETAILED_ERROR_MESSAGES: "true"/"false" (default false)
            API_SECURITY_PROTECTED_PREFIX: e.g. "/api/" (default unset)

        Raises:
            SecurityConfigError: If a value cannot be parsed or the result is invalid
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            value = env.get(prefix + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        tolerance_raw = get("TIMESTAMP_TOLERANCE")
        try:
            tolerance = int(tolerance_raw) if tolerance_raw else DEFAULT_TOLERANCE_SECONDS
        except ValueError:
            raise SecurityConfigError(
                f"{prefix}TIMESTAMP_TOLERANCE must be an integer, got {tolerance_raw!r}"
            ) from None

        paths_raw = get("PUBLIC_PATHS")
        if paths_raw is None:
            public_paths = DEFAULT_PUBLIC_PATHS
        else:
            public_paths = tuple(p.strip() for p in paths_raw.split(",") if p.strip())

        policy = cls(
            secret_key=env.get(prefix + "SECRET_KEY", ""),
            enabled=_parse_bool(get("ENABLED"), True, prefix + "ENABLED"),
            tolerance_seconds=tolerance,
            public_paths=public_paths,
            log_events=_parse_bool(
                get("LOG_SECURITY_EVENTS"), True, prefix + "LOG_SECURITY_EVENTS"
            ),
            detailed_errors=_parse_bool(
                get("DETAILED_ERROR_MESSAGES"), False, prefix + "DETAILED_ERROR_MESSAGES"
            ),
            protected_prefix=get("PROTECTED_PREFIX"),
        )

        logger.info(
            "security_policy_loaded",
            enabled=policy.enabled,
            tolerance_seconds=policy.tolerance_seconds,
            public_paths_count=len(policy.public_paths),
            detailed_errors=policy.detailed_errors,
        )
        return policy


def _parse_bool(value: Optional[str], default: bool, name: str) -> bool:
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise SecurityConfigError(f"{name} must be a boolean, got {value!r}")
