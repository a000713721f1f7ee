from typing import Dict

from fastapi.responses import PlainTextResponse, Response

from page_relay.app_proxy.fetcher import UpstreamResponse
from page_relay.errors import ProxyError

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
FRAME_POLICY = "frame-ancestors *"

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# Upstream headers that never reach the caller
STRIPPED_HEADERS = HOP_BY_HOP_HEADERS | {
    "x-frame-options",
    "content-security-policy",
    "content-security-policy-report-only",
    # httpx already decoded the body, Starlette sets the length itself
    "content-encoding",
    "content-length",
    "set-cookie",
}


def passthrough_headers(upstream: UpstreamResponse) -> Dict[str, str]:
    headers = {}
    for name, value in upstream.headers:
        if name.lower() in STRIPPED_HEADERS:
            continue
        headers[name.lower()] = value
    if upstream.content_type:
        headers["content-type"] = upstream.content_type
    return headers


def build_html_response(html_text: str) -> Response:
    """Rewritten pages are always 200 and embeddable in any frame."""
    return Response(
        content=html_text.encode("utf-8"),
        status_code=200,
        headers={
            "content-type": HTML_CONTENT_TYPE,
            "content-security-policy": FRAME_POLICY,
        },
    )


def build_passthrough_response(upstream: UpstreamResponse) -> Response:
    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        headers=passthrough_headers(upstream),
    )


def build_error_response(error: ProxyError) -> Response:
    return PlainTextResponse(error.body, status_code=error.status_code)
