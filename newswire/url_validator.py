"""
URL Validator - Refuse source feed URLs that point at internal networks.

Feeds are fetched through public proxies, so a source URL aimed at
localhost, a private range or a cloud metadata host is never useful and
is rejected before any proxy is asked to retrieve it.
"""

import ipaddress
from urllib.parse import urlparse

from .validators import ALLOWED_SCHEMES


class SSRFError(Exception):
    """Raised when a source URL fails validation."""

    pass


# Blocked IP ranges (private, loopback, link-local, metadata)
BLOCKED_IP_RANGES = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("255.255.255.255/32"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

BLOCKED_HOSTNAMES = {
    "localhost",
    "localhost.localdomain",
    "ip6-localhost",
    "ip6-loopback",
    "metadata",
    "metadata.google.internal",
}

BLOCKED_SUFFIXES = (".local", ".internal", ".localhost")


def is_ip_blocked(ip_str: str) -> bool:
    """Check if an IP address is in a blocked range."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(ip in network for network in BLOCKED_IP_RANGES)


def validate_source_url(url: str) -> str:
    """
    Validate a source feed URL.

    Args:
        url: The feed URL from a source descriptor

    Returns:
        The validated URL

    Raises:
        SSRFError: If the URL fails validation
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise SSRFError(f"Invalid URL format: {e}")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise SSRFError(f"URL scheme '{parsed.scheme}' is not allowed")

    if not parsed.hostname:
        raise SSRFError("URL must include a hostname")

    hostname = parsed.hostname.lower()

    if hostname in BLOCKED_HOSTNAMES:
        raise SSRFError(f"Host '{hostname}' is not allowed")

    if is_ip_blocked(hostname):
        raise SSRFError(f"IP address '{hostname}' is not allowed")

    if hostname.endswith(BLOCKED_SUFFIXES):
        raise SSRFError(f"Host '{hostname}' is not allowed")

    return url
