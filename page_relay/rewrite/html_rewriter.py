"""
Text-level HTML rewriting that routes page assets back through the proxy.

No DOM is built. The engine removes CSP meta tags, then makes one pass over
quoted `src`, `href`, `action` and `srcset` attributes and replaces each value
with `<proxy base>?url=<percent-encoded absolute url>`. A value that cannot be
resolved keeps its original text; a single bad URL never aborts the rewrite.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

logger = logging.getLogger("uvicorn.error")

REWRITABLE_SCHEMES = ("http", "https")

# Characters encodeURIComponent leaves alone, minus the single quote
_URI_COMPONENT_SAFE = "!~*()"

CSP_META_PATTERN = re.compile(
    r"""<meta\b[^>]*\bhttp-equiv\s*=\s*["']Content-Security-Policy["'][^>]*>""",
    re.IGNORECASE,
)

# name=value triples; values hold neither quote character nor a '>'.
# data-src and data-srcset are included.
ATTRIBUTE_PATTERN = re.compile(
    r"""(?<!\w)(?P<name>srcset|src|href|action)(?P<eq>\s*=\s*)"""
    r"""(?:"(?P<dq>[^"'>]*)"|'(?P<sq>[^'">]*)')""",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RewriteContext:
    base_url: str
    proxy_base_url: str

    def proxy_url(self, absolute_url: str) -> str:
        return f"{self.proxy_base_url}?url={quote(absolute_url, safe=_URI_COMPONENT_SAFE)}"


def _resolve(candidate: str, base_url: str) -> Optional[str]:
    candidate = candidate.strip()
    if not candidate:
        return None
    try:
        absolute = urljoin(base_url, candidate)
        parts = urlsplit(absolute)
        parts.port
    except ValueError:
        return None
    if parts.scheme not in REWRITABLE_SCHEMES or not parts.hostname:
        return None
    if any(ch.isspace() for ch in parts.hostname):
        return None
    if not parts.path:
        absolute = urlunsplit(
            (parts.scheme, parts.netloc, "/", parts.query, parts.fragment)
        )
    return absolute


def resolve_url(value: str, base_url: str) -> Optional[str]:
    """
    Resolve an attribute value against the page URL.

    Returns the absolute http(s) URL, or None when the value is empty,
    malformed, or points at a non-fetchable scheme such as data: or mailto:.
    """
    return _resolve(html.unescape(value), base_url)


def rewrite_url_value(value: str, ctx: RewriteContext) -> Optional[str]:
    absolute = resolve_url(value, ctx.base_url)
    if absolute is None:
        return None
    return ctx.proxy_url(absolute)


def rewrite_srcset_value(value: str, ctx: RewriteContext) -> Optional[str]:
    """Rewrite every candidate of a srcset list, or nothing at all."""
    rewritten = []
    for candidate in html.unescape(value).split(","):
        candidate = candidate.strip()
        if not candidate:
            continue
        url_token = candidate.split()[0]
        descriptor = candidate[len(url_token):]
        absolute = _resolve(url_token, ctx.base_url)
        if absolute is None:
            return None
        rewritten.append(f"{ctx.proxy_url(absolute)}{descriptor}")
    if not rewritten:
        return None
    return ", ".join(rewritten)


def strip_csp_meta(text: str) -> str:
    return CSP_META_PATTERN.sub("", text)


def rewrite_attributes(text: str, ctx: RewriteContext) -> str:
    counts = {"rewritten": 0, "skipped": 0}

    def _replace(match: re.Match) -> str:
        quote_char = '"' if match.group("dq") is not None else "'"
        value = match.group("dq") if quote_char == '"' else match.group("sq")

        if match.group("name").lower() == "srcset":
            new_value = rewrite_srcset_value(value, ctx)
        else:
            new_value = rewrite_url_value(value, ctx)

        if new_value is None:
            counts["skipped"] += 1
            return match.group(0)

        counts["rewritten"] += 1
        escaped = html.escape(new_value, quote=True)
        return f"{match.group('name')}{match.group('eq')}{quote_char}{escaped}{quote_char}"

    result = ATTRIBUTE_PATTERN.sub(_replace, text)
    logger.debug(
        f"[Rewrite] {counts['rewritten']} attributes rewritten, "
        f"{counts['skipped']} left unchanged (base {ctx.base_url})"
    )
    return result


def rewrite_html(html_text: str, base_url: str, proxy_base_url: str) -> str:
    ctx = RewriteContext(base_url=base_url, proxy_base_url=proxy_base_url)
    return rewrite_attributes(strip_csp_meta(html_text), ctx)
