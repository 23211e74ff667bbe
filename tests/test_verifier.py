"""
Tests for the request verification state machine.
"""

import pytest

from mailer_security.hmac_auth import (
    AuthDecision,
    AuthVia,
    ErrorCode,
    SecurityPolicy,
    create_signed_headers,
    verify_request,
)
from mailer_security.hmac_auth import verifier

SECRET_KEY = "s3cr3t-key-of-at-least-32-chars!!"
NOW = 1700000000000
PATH = "/api/v1/emails"


def signed(timestamp=NOW, project_token="proj123", secret_key=SECRET_KEY):
    return create_signed_headers("access-key-123", project_token, secret_key, timestamp)


@pytest.fixture
def policy():
    return SecurityPolicy(secret_key=SECRET_KEY)


class TestBypass:
    """Requests that skip signature checks."""

    def test_disabled_policy_accepts_anything(self):
        policy = SecurityPolicy(enabled=False)
        outcome = verify_request(policy, PATH, {})
        assert outcome.is_authenticated
        assert outcome.via == AuthVia.DISABLED

    def test_public_path(self, policy):
        outcome = verify_request(policy, "/api/v1/public/health", {})
        assert outcome.is_authenticated
        assert outcome.via == AuthVia.PUBLIC_PATH
        assert outcome.matched_pattern == "/api/v1/public/**"

    def test_outside_protected_prefix(self):
        policy = SecurityPolicy(secret_key=SECRET_KEY, protected_prefix="/api/")
        outcome = verify_request(policy, "/metrics", {})
        assert outcome.via == AuthVia.UNPROTECTED_PREFIX

    def test_inside_protected_prefix_still_checked(self):
        policy = SecurityPolicy(secret_key=SECRET_KEY, protected_prefix="/api/")
        outcome = verify_request(policy, PATH, {})
        assert outcome.code == ErrorCode.MISSING_ACCESS_KEY


class TestRejections:
    """Each failing step maps to its own code."""

    @pytest.mark.parametrize("header,code", [
        ("X-Access-Key", ErrorCode.MISSING_ACCESS_KEY),
        ("X-Timestamp", ErrorCode.MISSING_TIMESTAMP),
        ("X-Access-Sign", ErrorCode.MISSING_SIGNATURE),
        ("X-Project-Token", ErrorCode.MISSING_PROJECT_TOKEN),
    ])
    def test_missing_header(self, policy, header, code):
        headers = signed()
        del headers[header]
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.decision == AuthDecision.REJECTED
        assert outcome.code == code
        assert outcome.reason == f"Missing {header} header"

    @pytest.mark.parametrize("header", ["X-Access-Key", "X-Timestamp", "X-Access-Sign", "X-Project-Token"])
    def test_blank_header_counts_as_missing(self, policy, header):
        headers = signed()
        headers[header] = "  "
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code.value.startswith("MISSING_")

    def test_headers_checked_in_order(self, policy):
        """With nothing sent, the access key is reported first."""
        outcome = verify_request(policy, PATH, {}, now_millis=NOW)
        assert outcome.code == ErrorCode.MISSING_ACCESS_KEY

    def test_unparseable_timestamp(self, policy):
        headers = signed()
        headers["X-Timestamp"] = "yesterday"
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_TIMESTAMP
        assert outcome.reason == "Invalid timestamp format"

    def test_stale_timestamp_with_valid_signature(self, policy):
        """Freshness fails even when the signature is correct."""
        headers = signed(timestamp=NOW - 300_001)
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_TIMESTAMP
        assert outcome.reason == "Request timestamp is too old or invalid"

    def test_boundary_timestamp_accepted(self, policy):
        headers = signed(timestamp=NOW - 300_000)
        assert verify_request(policy, PATH, headers, now_millis=NOW).is_authenticated

    def test_bad_signature(self, policy):
        headers = signed(secret_key="some-other-secret-key-32-chars-long")
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_SIGNATURE
        assert outcome.access_key == "access-key-123"

    def test_token_swapped_after_signing(self, policy):
        headers = signed()
        headers["X-Project-Token"] = "other-project"
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_SIGNATURE

    @pytest.mark.parametrize("value", [f" {NOW}", f"{NOW} ", f"\t{NOW}"])
    def test_padded_timestamp_is_malformed(self, policy, value):
        headers = signed()
        headers["X-Timestamp"] = value
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_TIMESTAMP
        assert outcome.reason == "Invalid timestamp format"

    @pytest.mark.parametrize("header", ["X-Access-Sign", "X-Project-Token"])
    def test_padded_signature_material_is_not_trimmed(self, policy, header):
        headers = signed()
        headers[header] = f" {headers[header]} "
        outcome = verify_request(policy, PATH, headers, now_millis=NOW)
        assert outcome.code == ErrorCode.INVALID_SIGNATURE

    def test_internal_fault_becomes_security_error(self, policy, monkeypatch):
        """Unexpected exceptions never escape verification."""
        def boom(*args, **kwargs):
            raise RuntimeError("crypto backend exploded")

        monkeypatch.setattr(verifier, "verify_signature", boom)
        outcome = verify_request(policy, PATH, signed(), now_millis=NOW)
        assert outcome.code == ErrorCode.SECURITY_ERROR
        assert "exploded" not in outcome.reason


class TestSuccess:
    """Fully signed requests."""

    def test_valid_request(self, policy):
        outcome = verify_request(policy, PATH, signed(), now_millis=NOW)
        assert outcome.is_authenticated
        assert outcome.via == AuthVia.SIGNATURE
        assert outcome.access_key == "access-key-123"

    def test_lowercase_header_names(self, policy):
        headers = {name.lower(): value for name, value in signed().items()}
        assert verify_request(policy, PATH, headers, now_millis=NOW).is_authenticated

    def test_replay_within_window_passes(self, policy):
        """No nonce store: the same request twice is accepted."""
        headers = signed()
        assert verify_request(policy, PATH, headers, now_millis=NOW).is_authenticated
        assert verify_request(policy, PATH, headers, now_millis=NOW + 1000).is_authenticated
