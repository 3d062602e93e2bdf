"""Audio proxy: streams an allow-listed audio file to the browser."""

import logging
from typing import Optional

import httpx
from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

from headers import AUDIO_CORS_HEADERS
from routers.proxy._streaming import relay, upstream_user_agent
from security import ALLOWED_SCHEMES, is_allowed_audio_host, validate_audio_target
from settings import get_settings

logger = logging.getLogger(__name__)


def build_audio_headers(request: Request, referer: Optional[str] = None) -> dict:
    """Headers for the upstream audio request.

    Forwards User-Agent and Range from the client, adds the host family's
    Referer if it has one, and asks for the unencoded file so byte ranges
    stay meaningful.
    """
    headers = {
        "User-Agent": upstream_user_agent(request.headers),
        "Accept-Encoding": "identity",
    }
    if referer:
        headers["Referer"] = referer

    range_header = request.headers.get("range")
    if range_header:
        headers["Range"] = range_header

    return headers


def is_allowed_redirect(url: httpx.URL) -> bool:
    """Audio redirects may only lead to another allow-listed http(s) host."""
    return url.scheme in ALLOWED_SCHEMES and is_allowed_audio_host(url.host)


async def proxy_audio(target: str, request: Request) -> Response:
    """Validate `target` and stream it back with range support.

    Returns 400 "Invalid target" without contacting anything when the
    target is malformed, not http(s) or not on the audio host allow-list.
    """
    audio, error = validate_audio_target(target)
    if audio is None:
        logger.warning(f"[Audio] Rejected target: {error}")
        return PlainTextResponse("Invalid target", status_code=400)

    headers = build_audio_headers(request, audio.rule.referer)

    logger.info(f"[Audio] {request.method} {audio.rule.domain} range={headers.get('Range', '-')}")

    return await relay(
        request.method,
        audio.url,
        headers,
        default_cache_control=get_settings().audio_cache_control,
        extra_headers=AUDIO_CORS_HEADERS,
        tag="Audio",
        allow_redirect=is_allowed_redirect,
    )
