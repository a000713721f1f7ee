"""
Validation pipeline for the caller supplied target URL.

Gates run in a fixed order and the first failure wins:
presence, API key, parse, scheme, host screening, allowlist.
"""

import hmac
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from page_relay.config import ProxyConfig
from page_relay.errors import ProxyError, RejectionReason
from page_relay.security.host_screener import ScreeningVerdict, screen_host

ALLOWED_SCHEMES = ("http", "https")

_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>\\^|%]")

_VERDICT_REASONS = {
    ScreeningVerdict.FORBIDDEN_LOCAL_HOST: RejectionReason.FORBIDDEN_HOST,
    ScreeningVerdict.FORBIDDEN_PRIVATE_RANGE: RejectionReason.FORBIDDEN_IP_RANGE,
    ScreeningVerdict.NOT_IN_ALLOWLIST: RejectionReason.NOT_ALLOWLISTED,
}


@dataclass(frozen=True)
class TargetRequest:
    raw_url: Optional[str]
    api_key: Optional[str]
    caller_scheme: str
    caller_host: str


@dataclass(frozen=True)
class ParsedTarget:
    scheme: str
    hostname: str
    url: str


def api_key_matches(expected: str, provided: Optional[str]) -> bool:
    # Plain equality, evaluated with constant effort
    return hmac.compare_digest(
        expected.encode("utf-8"), (provided or "").encode("utf-8")
    )


def parse_target(raw_url: str) -> ParsedTarget:
    """Parse an absolute http(s) URL or raise INVALID_URL / UNSUPPORTED_SCHEME."""
    try:
        parts = urlsplit(raw_url.strip())
        # Accessing .port validates it
        parts.port
    except ValueError:
        raise ProxyError(RejectionReason.INVALID_URL)

    if not parts.scheme:
        raise ProxyError(RejectionReason.INVALID_URL)
    if parts.scheme not in ALLOWED_SCHEMES:
        raise ProxyError(RejectionReason.UNSUPPORTED_SCHEME)

    hostname = parts.hostname
    if not hostname or _FORBIDDEN_HOST_CHARS.search(hostname):
        raise ProxyError(RejectionReason.INVALID_URL)

    url = urlunsplit(
        (parts.scheme, parts.netloc, parts.path or "/", parts.query, parts.fragment)
    )
    return ParsedTarget(scheme=parts.scheme, hostname=hostname, url=url)


def screen_target(raw_url: str, config: ProxyConfig) -> ParsedTarget:
    """Parse, then apply host screening and the allowlist. Also used for redirects."""
    target = parse_target(raw_url)

    verdict = screen_host(target.hostname, config.allowlist)
    if verdict is not ScreeningVerdict.ALLOWED:
        raise ProxyError(_VERDICT_REASONS[verdict])

    return target


def validate(
    raw_url: Optional[str], provided_key: Optional[str], config: ProxyConfig
) -> ParsedTarget:
    if not raw_url or not raw_url.strip():
        raise ProxyError(RejectionReason.MISSING_TARGET)

    if config.api_key and not api_key_matches(config.api_key, provided_key):
        raise ProxyError(RejectionReason.UNAUTHORIZED)

    return screen_target(raw_url, config)


def validate_request(request: TargetRequest, config: ProxyConfig) -> ParsedTarget:
    return validate(request.raw_url, request.api_key, config)
