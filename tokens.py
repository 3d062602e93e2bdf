"""Meting `auth` token generation and verification."""

import hashlib
import hmac
import logging

from settings import get_settings

logger = logging.getLogger(__name__)

# Upstream types whose `id` must be signed
SIGNED_TYPES = frozenset({"url", "lrc", "pic"})


def requires_signature(type_: str) -> bool:
    """Check if the upstream type needs an `auth` parameter."""
    return type_ in SIGNED_TYPES


def sign(server: str, type_: str, id_: str) -> str:
    """Compute the Meting auth token for a request.

    Args:
        server: Upstream platform (e.g. "netease")
        type_: Upstream type (e.g. "url", "lrc", "pic")
        id_: Resource identifier

    Returns:
        Lowercase hex HMAC-SHA1 digest of server + type + id (40 characters)
    """
    message = f"{server}{type_}{id_}"
    key = get_settings().auth_secret.encode("utf-8")
    return hmac.new(key, message.encode("utf-8"), hashlib.sha1).hexdigest()


def verify(auth: str, server: str, type_: str, id_: str) -> bool:
    """Check a client-supplied auth token against our own signature."""
    if not auth:
        return False

    expected = sign(server, type_, id_)
    if not hmac.compare_digest(auth.lower().encode("utf-8"), expected.encode("utf-8")):
        logger.debug(f"Auth mismatch for {server}/{type_}")
        return False
    return True
