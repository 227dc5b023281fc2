"""Anti-SSRF checks for user-configured fetch targets.

Blocks non-http(s) schemes, embedded credentials, localhost names and any
private, loopback, link-local, multicast or reserved address, either written
literally in the URL or returned by DNS for the hostname.
"""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

_BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"}

# Ranges not covered by ipaddress' is_private/is_loopback/... flags
_EXTRA_BLOCKED_NETS = [
    ipaddress.ip_network("100.64.0.0/10"),  # carrier-grade NAT
    ipaddress.ip_network("192.0.0.0/24"),
    ipaddress.ip_network("198.18.0.0/15"),
]

Resolver = Callable[[str], Iterable[str]]


@dataclass(frozen=True)
class UrlValidation:
    valid: bool
    url: Optional[str] = None
    reason: Optional[str] = None


def is_blocked_ip(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    ):
        return True
    return any(ip in net for net in _EXTRA_BLOCKED_NETS)


def _resolve_host(hostname: str) -> List[str]:
    infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return sorted({str(info[4][0]) for info in infos})


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
        return True
    except ValueError:
        return False


def validate_fetch_url(
    raw_url: str,
    *,
    require_https: bool = False,
    resolver: Optional[Resolver] = None,
) -> UrlValidation:
    """Return whether ``raw_url`` is safe to fetch, plus the URL to fetch."""
    if not raw_url or not raw_url.strip():
        return UrlValidation(False, reason="Empty URL")
    try:
        parts = urlsplit(raw_url.strip())
        hostname = (parts.hostname or "").lower().rstrip(".")
    except ValueError:
        return UrlValidation(False, reason="Invalid URL")

    allowed = ("https",) if require_https else ("http", "https")
    if parts.scheme.lower() not in allowed:
        return UrlValidation(
            False, reason=f"Scheme not allowed: {parts.scheme or '(none)'}"
        )
    if parts.username or parts.password:
        return UrlValidation(False, reason="URLs with credentials are not allowed")
    if not hostname:
        return UrlValidation(False, reason="Missing host")
    if hostname in _BLOCKED_HOSTNAMES or hostname.endswith(".localhost"):
        return UrlValidation(False, reason=f"Blocked host: {hostname}")

    normalized = urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, "")
    )

    if _is_ip_literal(hostname):
        if is_blocked_ip(hostname):
            return UrlValidation(False, reason="Access to private/internal IPs is not allowed")
        return UrlValidation(True, url=normalized)

    resolve = resolver or _resolve_host
    try:
        addresses = list(resolve(hostname))
    except (OSError, UnicodeError) as exc:
        return UrlValidation(False, reason=f"DNS resolution failed: {exc}")
    if not addresses:
        return UrlValidation(False, reason="Could not resolve hostname")
    for addr in addresses:
        if is_blocked_ip(addr):
            return UrlValidation(False, reason="URL resolves to a private/internal IP address")
    return UrlValidation(True, url=normalized)
