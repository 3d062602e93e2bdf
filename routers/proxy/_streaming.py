"""Shared upstream client and streaming relay.

Every proxied request makes exactly one upstream call through relay(), which
streams the upstream body back without buffering it.
"""

import logging
from typing import AsyncIterator, Callable, Dict, Mapping, Optional

import httpx
from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from headers import SAFE_RESPONSE_HEADERS, filter_response_headers
from settings import get_settings

logger = logging.getLogger(__name__)

# Shared HTTP client for connection pooling
_client: Optional[httpx.AsyncClient] = None


async def get_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client."""
    global _client
    if _client is None or _client.is_closed:
        s = get_settings()
        _client = httpx.AsyncClient(timeout=httpx.Timeout(s.upstream_timeout), follow_redirects=True)
    return _client


async def close_client() -> None:
    """Close the shared HTTP client (application shutdown)."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
    _client = None


def upstream_user_agent(inbound: Mapping[str, str]) -> str:
    """User-Agent to send upstream: the client's, else the configured fallback."""
    return inbound.get("user-agent") or get_settings().fallback_user_agent


async def _stream_body(upstream: httpx.Response, decoded: bool) -> AsyncIterator[bytes]:
    """Yield the upstream body and close the upstream response however the stream ends."""
    chunks = upstream.aiter_bytes() if decoded else upstream.aiter_raw()
    try:
        async for chunk in chunks:
            yield chunk
    finally:
        await upstream.aclose()


async def _send(
    client: httpx.AsyncClient,
    request: httpx.Request,
    allow_redirect: Optional[Callable[[httpx.URL], bool]],
    tag: str,
) -> httpx.Response:
    """Send request, following redirects only to URLs allow_redirect accepts.

    Without allow_redirect the client's own redirect handling applies.
    """
    if allow_redirect is None:
        return await client.send(request, stream=True)

    upstream = await client.send(request, stream=True, follow_redirects=False)
    hops = 0
    while upstream.next_request is not None:
        next_request = upstream.next_request
        await upstream.aclose()
        if not allow_redirect(next_request.url):
            logger.warning(f"[{tag}] Redirect refused: {request.url.host} -> {next_request.url.host}")
            raise HTTPException(
                status_code=502,
                detail="Upstream error: redirect not allowed",
                headers={"Access-Control-Allow-Origin": "*"},
            )
        hops += 1
        if hops > client.max_redirects:
            raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=next_request)
        upstream = await client.send(next_request, stream=True, follow_redirects=False)
    return upstream


async def relay(
    method: str,
    url: str,
    headers: Dict[str, str],
    default_cache_control: str,
    extra_headers: Optional[Mapping[str, str]] = None,
    tag: str = "Upstream",
    allow_redirect: Optional[Callable[[httpx.URL], bool]] = None,
) -> StreamingResponse:
    """Send one upstream request and stream its response to the client.

    Status and body pass through unchanged; headers pass through
    filter_response_headers(). The upstream response is closed once the body
    has been sent, the upstream failed mid-body or the client went away.

    Raises:
        HTTPException: 502 if the upstream could not be reached at all, or
            redirected to a URL allow_redirect rejected
    """
    client = await get_client()
    request = client.build_request(method, url, headers=headers)

    try:
        upstream = await _send(client, request, allow_redirect, tag)
    except httpx.RequestError as e:
        logger.warning(f"[{tag}] Upstream error: {method} {request.url.host} - {e!r}")
        raise HTTPException(
            status_code=502,
            detail=f"Upstream error: {type(e).__name__}",
            headers={"Access-Control-Allow-Origin": "*"},
        )

    logger.info(f"[{tag}] {method} {upstream.url.host} -> {upstream.status_code}")

    response_headers = filter_response_headers(
        upstream.headers.items(),
        default_cache_control,
        allowed=SAFE_RESPONSE_HEADERS,
        extra=extra_headers,
    )

    decoded = upstream.headers.get("content-encoding", "identity").lower() != "identity"
    if decoded:
        # httpx decodes the body, so the wire length no longer applies
        response_headers.pop("content-length", None)

    return StreamingResponse(
        _stream_body(upstream, decoded),
        status_code=upstream.status_code,
        headers=response_headers,
        # Covers a client that disconnects before the body is started
        background=BackgroundTask(upstream.aclose),
    )
