"""
Header Functions
================
Functions for creating and parsing signed request headers.
"""

from typing import Dict, Mapping, Optional

from .models import AuthRejection, ErrorCode, SignedRequest
from .signature import compute_signature
from .timestamp import current_millis, parse_timestamp

ACCESS_KEY_HEADER = "X-Access-Key"
TIMESTAMP_HEADER = "X-Timestamp"
SIGNATURE_HEADER = "X-Access-Sign"
PROJECT_TOKEN_HEADER = "X-Project-Token"

# Checked in this order; the first missing one is reported
REQUIRED_HEADERS = (
    (ACCESS_KEY_HEADER, ErrorCode.MISSING_ACCESS_KEY),
    (TIMESTAMP_HEADER, ErrorCode.MISSING_TIMESTAMP),
    (SIGNATURE_HEADER, ErrorCode.MISSING_SIGNATURE),
    (PROJECT_TOKEN_HEADER, ErrorCode.MISSING_PROJECT_TOKEN),
)


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works for plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    value = headers.get(lowered)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def extract_signed_request(headers: Mapping[str, str], path: str) -> SignedRequest:
    """
    Pull the signature material out of request headers.

    Args:
        headers: Request headers
        path: Request path

    Returns:
        SignedRequest with the parsed timestamp

    Raises:
        AuthRejection: If a header is missing/blank or the timestamp is malformed

    Values are used exactly as received; surrounding whitespace is not trimmed.
    """
    values: Dict[str, str] = {}
    for name, code in REQUIRED_HEADERS:
        value = get_header(headers, name)
        if value is None or not value.strip():
            raise AuthRejection(code, f"Missing {name} header")
        values[name] = value

    try:
        timestamp = parse_timestamp(values[TIMESTAMP_HEADER])
    except ValueError:
        raise AuthRejection(ErrorCode.INVALID_TIMESTAMP, "Invalid timestamp format") from None

    return SignedRequest(
        access_key=values[ACCESS_KEY_HEADER],
        timestamp_millis=timestamp,
        project_token=values[PROJECT_TOKEN_HEADER],
        provided_signature=values[SIGNATURE_HEADER],
        path=path,
    )


def create_signed_headers(
    access_key: str,
    project_token: str,
    secret_key: str,
    timestamp_millis: Optional[int] = None,
) -> Dict[str, str]:
    """
    Create headers for a signed request.

    Args:
        access_key: Caller identity (logged by the server, not signed)
        project_token: Project token folded into the signature
        secret_key: Shared secret
        timestamp_millis: Timestamp to sign; defaults to now

    Returns:
        Dictionary of headers to include in the request
    """
    if timestamp_millis is None:
        timestamp_millis = current_millis()
    signature = compute_signature(timestamp_millis, project_token, secret_key)

    return {
        ACCESS_KEY_HEADER: access_key,
        TIMESTAMP_HEADER: str(timestamp_millis),
        PROJECT_TOKEN_HEADER: project_token,
        SIGNATURE_HEADER: signature,
    }


def get_client_ip(headers: Mapping[str, str], remote_addr: Optional[str] = None) -> str:
    """Extract real client IP: first X-Forwarded-For entry, then X-Real-IP, then the peer."""
    forwarded = get_header(headers, "X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = get_header(headers, "X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return remote_addr or "unknown"
