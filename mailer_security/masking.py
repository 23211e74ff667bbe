"""
Masking Helpers
===============
Mask identifiers before they reach log output.
"""

from typing import Optional


def mask(value: Optional[str], unmasked_start: int = 0, unmasked_end: int = 0, mask_char: str = "*") -> Optional[str]:
    """
    Mask the middle of a string, keeping some characters at either end.

    If the unmasked counts cover the whole input it is returned unchanged.
    """
    if not value:
        return value
    unmasked_start = max(unmasked_start, 0)
    unmasked_end = max(unmasked_end, 0)
    length = len(value)
    if unmasked_start + unmasked_end >= length:
        return value
    end = value[length - unmasked_end:] if unmasked_end else ""
    return value[:unmasked_start] + mask_char * (length - unmasked_start - unmasked_end) + end


def mask_access_key(access_key: Optional[str]) -> Optional[str]:
    """Mask an access key for logs, keeping the first 4 characters of long keys."""
    if not access_key:
        return access_key
    keep = 4 if len(access_key) > 8 else 0
    return mask(access_key, keep, 0)


def mask_email(email: Optional[str]) -> Optional[str]:
    """
    Mask the local part of an email address, keeping the domain.

    Local parts of three or more characters keep their first and last
    character, two-character ones keep the first, single characters are
    fully masked. Values that do not look like ``local@domain`` keep only
    their first character.

    Example:
        >>> mask_email("john.doe@example.com")
        'j******e@example.com'
    """
    if not email or not email.strip():
        return email
    at = email.find("@")
    if at <= 0 or at == len(email) - 1:
        return mask(email, 1, 0)

    local, domain = email[:at], email[at:]
    if len(local) >= 3:
        masked_local = mask(local, 1, 1)
    elif len(local) == 2:
        masked_local = mask(local, 1, 0)
    else:
        masked_local = mask(local, 0, 0)
    return masked_local + domain
