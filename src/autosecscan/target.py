"""Target validation and URL helpers."""

import asyncio
import ipaddress
import logging
import socket
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from autosecscan.errors import TargetValidationError
from autosecscan.models import TargetInfo
from autosecscan.tools.http import HTTPClient

logger = logging.getLogger(__name__)

REACHABILITY_TIMEOUT = 10.0
DEFAULT_PORTS = {"http": 80, "https": 443}
SENSITIVE_QUERY_MARKERS = ("token", "key", "secret", "password")


def normalize_url(raw_url: str) -> str:
    """Default to https when the URL carries no scheme."""
    url = raw_url.strip()
    if not url:
        raise TargetValidationError("target URL is empty")
    if url.startswith(("http://", "https://")):
        return url
    if "://" in url:
        scheme = url.split("://", 1)[0]
        raise TargetValidationError(
            f"unsupported protocol: {scheme} (only http/https allowed)"
        )
    return f"https://{url}"


def parse_target(raw_url: str) -> tuple[str, str, str, int]:
    """Return ``(url, scheme, host, port)`` for *raw_url* without touching the network."""
    url = normalize_url(raw_url)
    try:
        parts = urlsplit(url)
        explicit_port = parts.port
    except ValueError as exc:
        raise TargetValidationError(f"invalid URL format: {exc}") from exc

    host = parts.hostname or ""
    if not host:
        raise TargetValidationError("could not extract domain from URL")
    return url, parts.scheme, host, explicit_port or DEFAULT_PORTS[parts.scheme]


async def resolve_ip(host: str) -> str:
    """Resolve *host*, preferring the first IPv4 address."""
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except OSError as exc:
        raise TargetValidationError(f"DNS resolution failed: {exc}") from exc

    addresses = [info[4][0] for info in infos]
    if not addresses:
        raise TargetValidationError("DNS resolution failed: no IP addresses found for domain")
    for address in addresses:
        if ipaddress.ip_address(address).version == 4:
            return address
    return addresses[0]


async def check_reachability(url: str, timeout: float = REACHABILITY_TIMEOUT) -> None:
    """One GET without following redirects; any HTTP response counts as reachable."""
    async with HTTPClient(timeout=timeout, follow_redirects=False) as client:
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            raise TargetValidationError(f"target unreachable: {exc}") from exc
    logger.debug("Reachability check for %s: HTTP %d", sanitize_url(url), response.status_code)


async def validate_target(raw_url: str, timeout: float = REACHABILITY_TIMEOUT) -> TargetInfo:
    """Validate *raw_url* and return the target the analyzers will scan."""
    url, scheme, host, port = parse_target(raw_url)
    ip = await resolve_ip(host)
    await check_reachability(url, timeout=timeout)
    logger.info("Target validated: %s (%s)", host, ip)
    return TargetInfo(url=url, domain=host, ip=ip, protocol=scheme, port=port)


def sanitize_url(raw_url: str) -> str:
    """Strip credentials and redact secret-looking query values for logging."""
    try:
        parts = urlsplit(raw_url)
    except ValueError:
        return raw_url

    netloc = parts.netloc.rsplit("@", 1)[-1]
    query = [
        (key, "[REDACTED]" if _is_sensitive(key) else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    # Keep the redaction marker readable.
    encoded = urlencode(query, safe="[]")
    return urlunsplit((parts.scheme, netloc, parts.path, encoded, parts.fragment))


def _is_sensitive(key: str) -> bool:
    lower_key = key.lower()
    return any(marker in lower_key for marker in SENSITIVE_QUERY_MARKERS)
