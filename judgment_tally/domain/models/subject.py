"""Subject and signer normalization.

Subjects are lowercased before lookup or storage so one logical subject
maps to exactly one record set. Signer identities compare
case-insensitively ("0xABC" and "0xabc" are the same signer).

Site subjects are the hostname of the page URL, so every page of a
site shares one rating.
"""

from __future__ import annotations

from urllib.parse import urlsplit

# Only pages served over these schemes can be rated
FLAGGABLE_URL_SCHEMES = frozenset({"http", "https"})


def normalize_subject(subject: str) -> str:
    """Normalize a subject key (hostname or comment id).

    Args:
        subject: Raw subject as supplied by the caller.

    Returns:
        Stripped, lowercased subject. Empty string for blank input.
    """
    return subject.strip().lower()


def normalize_signer(signer: str) -> str:
    """Normalize a signer identity for case-insensitive comparison."""
    return signer.strip().lower()


def subject_from_url(url: str) -> str | None:
    """Derive the site subject (lowercase hostname) from a page URL.

    Args:
        url: Full page URL, e.g. "https://Example.com/path?q=1".

    Returns:
        The hostname ("example.com"), or None if the URL has none.
    """
    try:
        hostname = urlsplit(url.strip()).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return normalize_subject(hostname)


def is_valid_flag_url(url: str) -> bool:
    """Check whether a URL identifies a page that can be rated.

    Browser-internal pages (chrome://, about:, file://) and anything
    without a hostname cannot be rated.

    Args:
        url: Full page URL.

    Returns:
        True if the URL uses http(s) and carries a hostname.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    return parts.scheme.lower() in FLAGGABLE_URL_SCHEMES and bool(parts.hostname)
