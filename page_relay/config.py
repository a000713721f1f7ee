from dataclasses import dataclass, field
from typing import Tuple

from page_relay import vars as env


@dataclass(frozen=True)
class ProxyConfig:
    """Startup configuration, read once and passed explicitly to the handler."""

    api_key: str = ""
    allowlist: Tuple[str, ...] = field(default_factory=tuple)
    proxy_path: str = "/api/proxy"
    public_url: str = ""
    proxy_timeout: float = 30.0
    forward_request_headers: Tuple[str, ...] = ("accept", "accept-language", "user-agent")


def load_config() -> ProxyConfig:
    return ProxyConfig(
        api_key=env.API_KEY,
        allowlist=tuple(env.ALLOWLIST),
        proxy_path=env.PROXY_PATH,
        public_url=env.PUBLIC_URL,
        proxy_timeout=env.PROXY_TIMEOUT,
        forward_request_headers=tuple(env.FORWARD_REQUEST_HEADERS),
    )


_CONFIG = load_config()


def get_proxy_config() -> ProxyConfig:
    """FastAPI dependency returning the process-wide configuration."""
    return _CONFIG
