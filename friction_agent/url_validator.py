from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass
from urllib.parse import urlparse, urlunparse

from .errors import ForbiddenTarget, InvalidInput

MAX_URL_LENGTH = 2048

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
_NUMERIC_HOST_RE = re.compile(r"^(?:0x[0-9a-f]+|\d+)(?:\.(?:0x[0-9a-f]+|\d+)){0,3}$")

_LOCAL_HOSTNAMES = {"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"}

_METADATA_HOSTS = {
    "169.254.169.254",
    "metadata.google.internal",
    "metadata",
    "100.100.100.200",
    "fd00:ec2::254",
}


@dataclass(frozen=True)
class ValidatedUrl:
    url: str
    hostname: str
    domain: str


def _canonical_host(hostname: str) -> str:
    """Drop trailing dots and spell numeric IPv4 hosts as dotted quads.

    Browsers and scrapers read ``127.1``, ``0x7f.0.0.1`` and ``2130706433`` as
    127.0.0.1, so the range checks must see the address they will connect to.
    """
    host = hostname.rstrip(".")
    if _NUMERIC_HOST_RE.match(host):
        try:
            return socket.inet_ntoa(socket.inet_aton(host))
        except OSError:
            raise InvalidInput("Invalid URL format") from None
    return host


def _parse_ip(hostname: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(hostname.strip("[]"))
    except ValueError:
        return None


def _is_internal_host(hostname: str) -> bool:
    if hostname in _LOCAL_HOSTNAMES or hostname.endswith(".localhost"):
        return True

    ip = _parse_ip(hostname)
    if ip is None:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if isinstance(ip, ipaddress.IPv4Address) and ip in ipaddress.ip_network("0.0.0.0/8"):
        return True
    return ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified or ip.is_reserved


def validate_url(raw: str | None) -> ValidatedUrl:
    """Normalize a user supplied URL and refuse anything that points inward.

    The hostname decides every endpoint the pipeline later asks the scraping
    provider to visit (the site itself plus its docs/help/support subdomains),
    so internal targets are refused here rather than left to the provider.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidInput("URL is required")
    if len(value) > MAX_URL_LENGTH:
        raise InvalidInput("URL is too long")

    if not _SCHEME_RE.match(value):
        value = "https://" + value

    try:
        parsed = urlparse(value)
        hostname = _canonical_host((parsed.hostname or "").lower())
        port = parsed.port
    except ValueError:
        raise InvalidInput("Invalid URL format") from None

    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidInput("Only HTTP and HTTPS URLs are allowed")
    if not hostname:
        raise InvalidInput("Invalid URL format")

    if hostname in _METADATA_HOSTS:
        raise ForbiddenTarget("Metadata endpoints are not allowed")
    if _is_internal_host(hostname):
        if _parse_ip(hostname) is None:
            raise ForbiddenTarget("Internal addresses are not allowed")
        raise ForbiddenTarget("Private IP addresses are not allowed")

    if "." not in hostname:
        raise InvalidInput("Invalid domain name")

    netloc = hostname if port is None else f"{hostname}:{port}"
    if ":" in hostname:
        netloc = f"[{hostname}]" if port is None else f"[{hostname}]:{port}"
    normalized = parsed._replace(scheme=parsed.scheme.lower(), netloc=netloc, path=parsed.path or "/", fragment="")

    domain = hostname[4:] if hostname.startswith("www.") else hostname
    return ValidatedUrl(url=urlunparse(normalized), hostname=hostname, domain=domain)
