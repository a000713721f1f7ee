"""
Literal host screening used to reject obvious local and private targets.

This is a baseline SSRF defense only. It does not resolve DNS names, so a
public name pointing at a private address passes, and it ignores IPv6
unique-local and link-local ranges as well as 169.254.0.0/16.
"""

import re
from enum import Enum
from typing import Iterable

LOCAL_HOSTS = {"localhost", "0.0.0.0", "::1"}

_DOTTED_QUAD = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")


class ScreeningVerdict(Enum):
    ALLOWED = "allowed"
    FORBIDDEN_LOCAL_HOST = "forbidden_local_host"
    FORBIDDEN_PRIVATE_RANGE = "forbidden_private_range"
    NOT_IN_ALLOWLIST = "not_in_allowlist"


def normalize_hostname(hostname: str) -> str:
    host = (hostname or "").strip().lower()
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host.rstrip(".")


def is_local_host(hostname: str) -> bool:
    host = normalize_hostname(hostname)
    if host in LOCAL_HOSTS or host.startswith("127."):
        return True
    return host.endswith(".local")


def is_private_ipv4(hostname: str) -> bool:
    """True for literal dotted-quad addresses in 10/8, 172.16/12 or 192.168/16."""
    host = normalize_hostname(hostname)
    if not _DOTTED_QUAD.match(host):
        return False
    first, second = (int(part) for part in host.split(".")[:2])
    return (
        first == 10
        or (first == 172 and 16 <= second <= 31)
        or (first == 192 and second == 168)
    )


def is_forbidden_host(hostname: str) -> bool:
    return is_local_host(hostname) or is_private_ipv4(hostname)


def is_allowlisted(hostname: str, allowlist: Iterable[str]) -> bool:
    """Exact match or dot-suffix match against any entry. Empty allows all."""
    entries = [e.strip().lower() for e in allowlist if e and e.strip()]
    if not entries:
        return True
    host = normalize_hostname(hostname)
    return any(host == entry or host.endswith("." + entry) for entry in entries)


def screen_host(hostname: str, allowlist: Iterable[str] = ()) -> ScreeningVerdict:
    """Apply the host rules in order; the first failing rule decides."""
    if is_local_host(hostname):
        return ScreeningVerdict.FORBIDDEN_LOCAL_HOST
    if is_private_ipv4(hostname):
        return ScreeningVerdict.FORBIDDEN_PRIVATE_RANGE
    if not is_allowlisted(hostname, allowlist):
        return ScreeningVerdict.NOT_IN_ALLOWLIST
    return ScreeningVerdict.ALLOWED
