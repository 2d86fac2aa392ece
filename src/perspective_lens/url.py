"""URL handling utilities."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger(__name__)


def extract_host(url: str) -> str:
    """Extract the lower-cased hostname from a URL, without a 'www.' prefix.

    Args:
        url: The URL to extract the host from.

    Returns:
        The hostname, or an empty string if the URL has none or is malformed.
    """
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        logger.debug(f"Could not parse url {url}")
        return ""
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def normalize_url(url: str) -> str:
    """Normalize a URL for identity comparison.

    Lower-cases scheme and host, strips 'www.', drops the fragment and any
    trailing slash on the path. Query strings are kept.
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return url.strip()
    host = extract_host(url)
    if not parts.scheme or not host:
        return url.strip()
    netloc = host if port is None else f"{host}:{port}"
    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, ""))
