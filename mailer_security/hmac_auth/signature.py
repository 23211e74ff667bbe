"""
Signature Functions
===================
HMAC-SHA512 signature computation and verification for request authentication.

Wire format::

    signature = hex(HMAC_SHA512(secret_key, str(timestamp_millis) + project_token))

The concatenation order is part of the client contract. Both the verifier and
the client helpers build the signed message through ``canonical_message`` only.
"""

import hmac
import hashlib

SIGNATURE_ALGORITHM = "sha512"


class InvalidSignatureInput(ValueError):
    """Raised when signing material is missing (a configuration bug)."""


def canonical_message(timestamp_millis: int, project_token: str) -> str:
    """Build the string that gets signed: decimal timestamp then token, no delimiter."""
    return f"{int(timestamp_millis)}{project_token}"


def compute_signature(
    timestamp_millis: int,
    project_token: str,
    secret_key: str,
) -> str:
    """
    Compute the HMAC-SHA512 signature for a request.

    Args:
        timestamp_millis: Unix epoch timestamp in milliseconds
        project_token: Project token folded into the signed message
        secret_key: Shared secret

    Returns:
        Lowercase hex-encoded HMAC-SHA512 digest

    Raises:
        InvalidSignatureInput: If project_token or secret_key is empty
    """
    if not project_token or not project_token.strip():
        raise InvalidSignatureInput("Project token cannot be empty")
    if not secret_key or not secret_key.strip():
        raise InvalidSignatureInput("Secret key cannot be empty")

    message = canonical_message(timestamp_millis, project_token)
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha512,
    ).hexdigest()


def constant_time_equals(provided: str, expected: str) -> bool:
    """
    Compare two signatures without leaking the mismatch position.

    Both values are compared as UTF-8 bytes. ``hmac.compare_digest`` walks the
    full length of its second operand even when the lengths differ, so the
    expected digest goes second.
    """
    return hmac.compare_digest(
        provided.encode("utf-8"),
        expected.encode("utf-8"),
    )


def verify_signature(
    timestamp_millis: int,
    project_token: str,
    secret_key: str,
    provided_signature: str,
) -> bool:
    """
    Verify a request signature using constant-time comparison.

    Args:
        timestamp_millis: Timestamp from the request
        project_token: Project token from the request
        secret_key: Shared secret
        provided_signature: Hex signature sent by the client

    Returns:
        True if the signature is valid

    Raises:
        InvalidSignatureInput: If project_token or secret_key is empty
    """
    expected_signature = compute_signature(timestamp_millis, project_token, secret_key)
    if not provided_signature or not provided_signature.strip():
        return False
    return constant_time_equals(provided_signature, expected_signature)
