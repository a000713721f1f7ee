import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from opentelemetry import trace

from page_relay.app_proxy.assembler import (
    build_error_response,
    build_html_response,
    build_passthrough_response,
)
from page_relay.app_proxy.fetcher import UpstreamResponse, fetch_upstream
from page_relay.config import ProxyConfig, get_proxy_config
from page_relay.errors import ProxyError, RejectionReason
from page_relay.rewrite.classifier import ContentClass, classify
from page_relay.rewrite.html_rewriter import rewrite_html
from page_relay.security.url_validator import (
    ParsedTarget,
    TargetRequest,
    screen_target,
    validate_request,
)
from page_relay.utils import secret_fingerprint
from page_relay.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)
from page_relay.utils.traced_requests import traced_request
from page_relay.vars import PROXY_PATH

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

TARGET_URL_HEADER = "x-target-url"
API_KEY_HEADER = "x-api-key"


def extract_target_request(request: Request) -> TargetRequest:
    """Collect everything the validator and rewriter need from the inbound request."""
    raw_url = request.query_params.get("url") or request.headers.get(TARGET_URL_HEADER)

    # Behind a TLS-terminating load balancer the request itself is plain http
    forwarded_proto = request.headers.get("x-forwarded-proto", "")
    caller_scheme = (
        forwarded_proto.split(",")[0].strip() or request.url.scheme or "https"
    )

    return TargetRequest(
        raw_url=raw_url,
        api_key=request.headers.get(API_KEY_HEADER),
        caller_scheme=caller_scheme,
        caller_host=request.headers.get("host", ""),
    )


def proxy_base_url(target_request: TargetRequest, config: ProxyConfig) -> str:
    if config.public_url:
        return f"{config.public_url}{config.proxy_path}"
    return f"{target_request.caller_scheme}://{target_request.caller_host}{config.proxy_path}"


def upstream_request_headers(request: Request, config: ProxyConfig) -> Dict[str, str]:
    """Only a fixed set of caller headers is sent to third-party hosts."""
    headers = {}
    for name, value in request.headers.items():
        if name.lower() in config.forward_request_headers:
            headers[name.lower()] = value
    return headers


def render_response(
    upstream: UpstreamResponse, target: ParsedTarget, proxy_base: str, span
) -> Response:
    content_class = classify(upstream.content_type)
    span.set_attribute("proxy.content_class", content_class.value)

    if content_class is ContentClass.OTHER:
        return build_passthrough_response(upstream)

    try:
        # Relative links resolve against where the page actually came from
        rewritten = rewrite_html(upstream.text(), upstream.url or target.url, proxy_base)
    except Exception as e:
        log_exception_with_details(logger, "[Proxy] Rewrite failed:", e)
        raise ProxyError(
            RejectionReason.INTERNAL_REWRITE_ERROR, format_exception_message(e)
        )
    return build_html_response(rewritten)


async def forward_to_upstream(request: Request, config: ProxyConfig) -> Response:
    """
    Validate the requested target, fetch it and return the caller's response.

    Validation failures become fixed 4xx plain-text responses. Upstream
    failures and unexpected errors become a 502 carrying a short message.
    """
    target_request = extract_target_request(request)

    with traced_request(
        tracer,
        operation="proxy_request",
        target_url=target_request.raw_url,
        secret=config.api_key,
        start_message=f"[Proxy] {request.method} {target_request.raw_url}",
        extra_attrs={"proxy.method": request.method},
    ) as span:
        try:
            target = validate_request(target_request, config)
        except ProxyError as e:
            span.set_attribute("proxy.rejection", e.reason.name)
            message = f"[Proxy] Rejected {target_request.raw_url!r}: {e.reason.name}"
            if e.reason is RejectionReason.UNAUTHORIZED:
                message += f" (key {secret_fingerprint(target_request.api_key)})"
            logger.warning(message)
            return build_error_response(e)

        span.set_attribute("proxy.target_host", target.hostname)
        proxy_base = proxy_base_url(target_request, config)

        try:
            upstream = await fetch_upstream(
                target.url,
                headers=upstream_request_headers(request, config),
                timeout=config.proxy_timeout,
                screen_redirect=lambda url: screen_target(url, config),
            )
            span.set_attribute("proxy.status_code", upstream.status_code)
            return render_response(upstream, target, proxy_base, span)

        except ProxyError as e:
            span.set_attribute("proxy.error", e.reason.name)
            logger.warning(f"[Proxy] {target.url} failed: {e.body}")
            return build_error_response(e)

        except Exception as e:
            log_exception_with_details(logger, f"[Proxy] Error for {target.url}:", e)
            span.set_attribute("proxy.error", str(e))
            return build_error_response(
                ProxyError(
                    RejectionReason.UPSTREAM_FETCH_ERROR, format_exception_message(e)
                )
            )


@router.api_route(PROXY_PATH, methods=["GET", "HEAD"])
async def proxy(request: Request, config: ProxyConfig = Depends(get_proxy_config)):
    """Fetch `url` (or the x-target-url header) through the proxy."""
    return await forward_to_upstream(request, config)
