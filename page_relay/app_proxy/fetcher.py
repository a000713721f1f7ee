import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin

import httpx

from page_relay.errors import UpstreamFetchError

logger = logging.getLogger("uvicorn.error")

MAX_REDIRECTS = 10


@dataclass
class UpstreamResponse:
    status_code: int
    content_type: str
    body: bytes
    url: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    encoding: Optional[str] = None

    def text(self) -> str:
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


def _error_detail(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


async def fetch_upstream(
    url: str,
    headers: Optional[dict] = None,
    timeout: float = 30.0,
    screen_redirect: Optional[Callable[[str], object]] = None,
) -> UpstreamResponse:
    """
    GET the target and read the full body.

    Redirects are followed here rather than by httpx so that each hop can be
    passed to `screen_redirect`, which raises to refuse the next location.
    Transport failures and timeouts are raised as UpstreamFetchError.
    """
    current_url = url
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), follow_redirects=False
        ) as client:
            for _ in range(MAX_REDIRECTS + 1):
                response = await client.request(
                    "GET", current_url, headers=headers or {}
                )
                location = response.headers.get("location")
                if not (response.is_redirect and location):
                    return UpstreamResponse(
                        status_code=response.status_code,
                        content_type=response.headers.get("content-type", ""),
                        body=response.content,
                        url=current_url,
                        headers=list(response.headers.items()),
                        encoding=response.encoding,
                    )

                next_url = urljoin(current_url, location)
                logger.debug(f"[Fetch] Redirect {current_url} -> {next_url}")
                if screen_redirect is not None:
                    screen_redirect(next_url)
                current_url = next_url
    except httpx.TimeoutException as e:
        logger.error(f"[Fetch] Timeout for {current_url}: {e}")
        raise UpstreamFetchError(f"upstream timed out ({_error_detail(e)})")
    except httpx.HTTPError as e:
        logger.error(f"[Fetch] Request to {current_url} failed: {e}")
        raise UpstreamFetchError(_error_detail(e))

    raise UpstreamFetchError(f"too many redirects (more than {MAX_REDIRECTS})")
