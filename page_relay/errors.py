"""
Failure taxonomy for the proxy.

Every way a request can fail maps to one RejectionReason, which fixes the
status code and the plain-text body returned to the caller.
"""

from enum import Enum
from typing import Optional


class RejectionReason(Enum):
    # (key, status, body); the key keeps members with equal status/body distinct
    MISSING_TARGET = ("missing_target", 400, 'Missing "url" query parameter')
    UNAUTHORIZED = ("unauthorized", 401, "Unauthorized — invalid API key")
    INVALID_URL = ("invalid_url", 400, "Invalid URL")
    UNSUPPORTED_SCHEME = ("unsupported_scheme", 400, "Only http/https allowed")
    FORBIDDEN_HOST = ("forbidden_host", 403, "Forbidden host")
    FORBIDDEN_IP_RANGE = ("forbidden_ip_range", 403, "Forbidden IP range")
    NOT_ALLOWLISTED = ("not_allowlisted", 403, "Host not allowed by allowlist")
    UPSTREAM_FETCH_ERROR = ("upstream_fetch_error", 502, "Proxy error")
    INTERNAL_REWRITE_ERROR = ("internal_rewrite_error", 502, "Proxy error")

    @property
    def status_code(self) -> int:
        return self.value[1]

    @property
    def message(self) -> str:
        return self.value[2]


class ProxyError(Exception):
    """Raised when a request cannot be proxied."""

    def __init__(self, reason: RejectionReason, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        super().__init__(self.body)

    @property
    def status_code(self) -> int:
        return self.reason.status_code

    @property
    def body(self) -> str:
        # Only the 502 family carries the underlying message
        if self.reason.status_code == 502:
            return f"{self.reason.message}: {self.detail or 'unknown error'}"
        return self.reason.message


class UpstreamFetchError(ProxyError):
    def __init__(self, detail: str):
        super().__init__(RejectionReason.UPSTREAM_FETCH_ERROR, detail)
