"""
Timestamp Validation
====================
Replay-window checks for signed requests.

There is no nonce store: two identical requests inside the window both pass.
"""

import re
import time
from typing import Optional

DEFAULT_TOLERANCE_SECONDS = 300  # 5 minutes

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")


def current_millis() -> int:
    """Current wall-clock time as Unix epoch milliseconds."""
    return time.time_ns() // 1_000_000


def parse_timestamp(raw: str) -> int:
    """
    Parse an ``X-Timestamp`` header value.

    Only a plain ASCII decimal integer (optional sign) in the signed 64-bit
    range is accepted.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if raw is None or not _TIMESTAMP_RE.fullmatch(raw):
        raise ValueError(f"Invalid timestamp format: {raw!r}")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError("Timestamp out of range")
    return value


def is_timestamp_valid(
    timestamp_millis: int,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    now_millis: Optional[int] = None,
) -> bool:
    """
    Check that a timestamp lies within the tolerance window around now.

    The window is symmetric, so stale requests and requests stamped too far
    in the future are both rejected. The boundary itself passes.

    Args:
        timestamp_millis: Timestamp from the request
        tolerance_seconds: Allowed skew in seconds
        now_millis: Reference time; defaults to the wall clock

    Returns:
        True if the timestamp is acceptable
    """
    if now_millis is None:
        now_millis = current_millis()
    return abs(now_millis - timestamp_millis) <= tolerance_seconds * 1000
