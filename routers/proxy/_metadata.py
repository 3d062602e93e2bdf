"""Meting API translator: maps the public query onto the upstream schema."""

import logging
import urllib.parse
from typing import Dict

from fastapi import HTTPException, Request
from fastapi.responses import Response

import tokens
from models import MetadataQuery
from routers.proxy._streaming import relay, upstream_user_agent
from settings import get_settings

logger = logging.getLogger(__name__)

# Public `types` value -> upstream `type` value
TYPE_MAP = {
    "search": "search",
    "url": "url",
    "lyric": "lrc",
    "pic": "pic",
}

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def build_upstream_params(query: MetadataQuery) -> Dict[str, str]:
    """Translate a Meting-style query into upstream parameters.

    Recognized types produce server, type and id (id is `name` for search,
    `id` otherwise, "" when missing). A client-supplied auth is passed through
    as-is; otherwise signed types get a freshly computed one. Unrecognized
    types leave server/type/id unset and let the upstream apply its default.
    """
    params: Dict[str, str] = {}
    type_ = TYPE_MAP.get(query.types or "")

    if type_ is not None:
        server = query.source or get_settings().default_source
        id_ = (query.name if type_ == "search" else query.id) or ""
        params["server"] = server
        params["type"] = type_
        params["id"] = id_

        if not query.auth and tokens.requires_signature(type_):
            params["auth"] = tokens.sign(server, type_, id_)

    if query.auth:
        params["auth"] = query.auth

    return params


def build_upstream_url(query: MetadataQuery) -> str:
    """Full upstream URL for a metadata query."""
    base = get_settings().api_base_url
    params = build_upstream_params(query)
    if not params:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urllib.parse.urlencode(params)}"


def check_client_auth(query: MetadataQuery) -> None:
    """Reject forged client auth when strict verification is enabled.

    Raises:
        HTTPException: 403 if the supplied auth does not match our signature
    """
    if not get_settings().verify_client_auth or not query.auth:
        return

    type_ = TYPE_MAP.get(query.types or "")
    if type_ is None or not tokens.requires_signature(type_):
        return

    server = query.source or get_settings().default_source
    if not tokens.verify(query.auth, server, type_, query.id or ""):
        logger.warning(f"[Metadata] Rejected client auth for {server}/{type_}")
        raise HTTPException(
            status_code=403,
            detail="Invalid auth",
            headers={"Access-Control-Allow-Origin": "*"},
        )


async def proxy_metadata(request: Request) -> Response:
    """Forward a metadata query to the Meting API and relay its JSON reply."""
    query = MetadataQuery.from_query_params(request.query_params)
    check_client_auth(query)

    url = build_upstream_url(query)
    headers = {
        "User-Agent": upstream_user_agent(request.headers),
        "Accept": "application/json",
    }

    logger.info(f"[Metadata] types={query.types} source={query.source or get_settings().default_source}")

    response = await relay(
        "GET",
        url,
        headers,
        default_cache_control=get_settings().metadata_cache_control,
        tag="Metadata",
    )
    if "content-type" not in response.headers:
        response.headers["content-type"] = JSON_CONTENT_TYPE
    return response
