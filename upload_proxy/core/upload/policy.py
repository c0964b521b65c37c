"""
Request origin policy.

The upload endpoint only serves requests whose Referer mentions the
allowed site. This is a coarse filter: the header is client-controlled
and trivially spoofed. It lives behind a single function so it can be
swapped for real authentication without touching the upload flow.
"""

from typing import Optional

DEFAULT_ALLOWED_REFERER = "gingrapp.com"


def referer_allowed(referer: Optional[str], allowed: str = DEFAULT_ALLOWED_REFERER) -> bool:
    """
    Return True if the Referer header contains the allowed substring.

    A missing header is treated as an empty string, so it never passes.
    Matching is a plain, case-sensitive substring test.
    """
    return allowed in (referer or "")
