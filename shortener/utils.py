# shortener/utils.py
# Input validation and parsing helpers shared by the HTTP layer and CLI.

import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

ALLOWED_URL_SCHEMES: frozenset = frozenset({"http", "https"})
MAX_URL_LENGTH: int = 2048

# Upper bound for a caller-supplied TTL: 30 days
MAX_TTL_SECONDS: float = 30 * 24 * 60 * 60


def validate_target_url(url: Optional[str]) -> str:
    """Return the stripped URL or raise ValueError naming the problem."""
    if url is not None and not isinstance(url, str):
        raise ValueError(f"Link must be a string. Got: {type(url).__name__}.")
    if not url or not url.strip():
        raise ValueError("No link present. Usage is /api/hash/create?link=<url>")
    url = url.strip()
    if len(url) > MAX_URL_LENGTH:
        raise ValueError(f"Link is longer than {MAX_URL_LENGTH} characters.")

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not parsed.netloc:
        raise ValueError(f"Link must be an absolute http(s) URL. Got: '{url}'.")
    return url


def parse_ttl_millis(value) -> Optional[float]:
    """
    Parse a TTL given in milliseconds into seconds.

    Missing or empty input means "use the table default" and returns None.
    Anything else must be a positive number; it is capped at MAX_TTL_SECONDS.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValueError(f"ttl must be a number of milliseconds. Got: {value}.")
    try:
        millis = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"ttl must be a number of milliseconds. Got: '{value}'.")
    if millis != millis or millis <= 0:  # NaN or non-positive
        raise ValueError(f"ttl must be greater than 0. Got: {value}.")
    return min(millis / 1000.0, MAX_TTL_SECONDS)


def sanitize_filename(name: str) -> str:
    """Strip path components, control chars, and limit length."""
    name = Path(name).name                        # strip directory traversal
    name = re.sub(r"[^\w\s\-.]", "", name)        # only safe chars
    name = re.sub(r"\.{2,}", ".", name)           # no double-extension tricks
    return name[:128].strip()


def safe_int(value, default: int, min_v: int, max_v: int) -> int:
    """Parse int from untrusted input, clamp to valid range, never raise."""
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default
    return max(min_v, min(max_v, v))


def safe_float(value, default: float, min_v: float, max_v: float) -> float:
    """Parse float from untrusted input, clamp to valid range, never raise."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    if v != v:
        return default
    return max(min_v, min(max_v, v))
