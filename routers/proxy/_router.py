"""Gateway endpoint: classifies each request and dispatches it."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

from headers import PREFLIGHT_HEADERS
from routers.proxy._audio import proxy_audio
from routers.proxy._metadata import proxy_metadata

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

# Methods routed to the handler; anything else outside ACCEPTED_METHODS gets 405
ROUTED_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]
ACCEPTED_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@router.api_route("", methods=ROUTED_METHODS)
async def gateway(request: Request) -> Response:
    """Single gateway endpoint.

    - OPTIONS: CORS pre-flight, answered locally
    - GET/HEAD with `target`: audio proxy
    - GET/HEAD without `target`: Meting API proxy
    """
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    if request.method not in ACCEPTED_METHODS:
        logger.info(f"[Router] Method not allowed: {request.method}")
        return PlainTextResponse("Method not allowed", status_code=405)

    target = request.query_params.get("target")
    if target:
        return await proxy_audio(target, request)

    return await proxy_metadata(request)
