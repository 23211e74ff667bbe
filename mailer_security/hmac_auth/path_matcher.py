"""
Path Matcher
============
Ant-style glob matching for public (unauthenticated) paths.

- ``?`` matches exactly one character other than ``/``
- ``*`` matches zero or more characters within one path segment
- ``**`` matches zero or more characters across segments

A pattern ending in ``/**`` also matches its bare prefix, so
``/api/v1/public/**`` covers ``/api/v1/public`` itself.
"""

import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Pattern[str]:
    parts = []
    i = 0
    length = len(pattern)
    while i < length:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                after_slash = not parts or parts[-1] == "/"
                at_end = i + 2 == length
                if after_slash and at_end and parts:
                    # "/**" may also match nothing, its slash included
                    parts[-1] = "(?:/.*)?"
                    i += 2
                elif after_slash and pattern.startswith("/", i + 2):
                    # "/**/" spans zero or more whole segments
                    parts.append("(?:.*/)?")
                    i += 3
                else:
                    parts.append(".*")
                    i += 2
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char) if char != "/" else "/")
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def match_path(pattern: str, path: str) -> bool:
    """Return True if ``path`` matches the Ant-style ``pattern`` in full."""
    return _compile(pattern).fullmatch(path) is not None


def find_public_pattern(patterns: Iterable[str], path: str) -> Optional[str]:
    """Return the first pattern (in configured order) that matches ``path``."""
    for pattern in patterns:
        if match_path(pattern, path):
            return pattern
    return None


def is_public_path(policy, path: str) -> bool:
    """Check whether ``path`` matches any of the policy's public patterns."""
    return find_public_pattern(policy.public_paths, path) is not None
