"""Response header filtering across the gateway's trust boundary."""

from typing import Iterable, Mapping, Optional, Tuple

# Upstream headers that may reach the client. Everything else (Set-Cookie,
# Server, hop-by-hop headers, ...) is dropped.
SAFE_RESPONSE_HEADERS = frozenset({
    "content-type",
    "content-length",
    "content-range",
    "accept-ranges",
    "cache-control",
    "expires",
    "last-modified",
    "etag",
})

ALLOWED_METHODS = "GET,HEAD,OPTIONS"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "86400",
}

# Browsers hide these from cross-origin scripts unless exposed explicitly
AUDIO_CORS_HEADERS = {
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Expose-Headers": "Content-Range, Content-Length, Accept-Ranges",
}


def filter_response_headers(
    source: Optional[Iterable[Tuple[str, str]]],
    default_cache_control: str,
    allowed: Iterable[str] = SAFE_RESPONSE_HEADERS,
    extra: Optional[Mapping[str, str]] = None,
) -> dict:
    """Build the client-facing header set from upstream response headers.

    Args:
        source: Upstream headers as (name, value) pairs, e.g. httpx.Headers.items()
        default_cache_control: Cache-Control value used when upstream sent none
        allowed: Lowercase header names that may be copied
        extra: Headers forced onto the result after filtering

    Returns:
        Dict keyed by lowercase header name
    """
    allowed = {name.lower() for name in allowed}
    headers = {}
    for name, value in source or ():
        key = name.lower()
        if key in allowed:
            headers[key] = value

    headers.setdefault("cache-control", default_cache_control)
    headers["access-control-allow-origin"] = "*"

    for name, value in (extra or {}).items():
        headers[name.lower()] = value

    return headers
