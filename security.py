"""Audio target validation for the gateway.

The `target` parameter is the only client-controlled URL the gateway will
fetch, so this module is what keeps it from being an open proxy:
- Hostnames are matched against the closed allow-list in settings
- Only http/https targets are accepted
- Host families flagged `force_http` are rewritten to plain http
- Redirects are only followed to hosts that pass the same check
"""

import logging
import urllib.parse
from typing import Optional, Tuple

from models import AudioHostRule, AudioTarget
from settings import get_settings

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})


def _matches(rule: AudioHostRule, hostname: str) -> bool:
    """Check a single rule against a lowercase hostname.

    The rule domain must end the hostname on a label boundary, so neither
    "notqq.com" nor "qq.com.evil.net" matches "qq.com".
    """
    domain = rule.domain.lower()
    return hostname == domain or hostname.endswith("." + domain)


def match_audio_host(hostname: Optional[str]) -> Optional[AudioHostRule]:
    """Return the first allow-list rule matching hostname, or None."""
    if not hostname:
        return None

    hostname = hostname.lower()
    for rule in get_settings().audio_hosts:
        if _matches(rule, hostname):
            return rule
    return None


def is_allowed_audio_host(hostname: Optional[str]) -> bool:
    """Check if hostname belongs to an allow-listed audio host family."""
    return match_audio_host(hostname) is not None


def _force_http(parsed: urllib.parse.ParseResult, port: Optional[int]) -> urllib.parse.ParseResult:
    """Switch a parsed URL to http, dropping a now-meaningless :443."""
    netloc = parsed.netloc
    if port == 443:
        netloc = netloc.rsplit(":", 1)[0]
    return parsed._replace(scheme="http", netloc=netloc)


def validate_audio_target(raw_url: str) -> Tuple[Optional[AudioTarget], Optional[str]]:
    """Validate and normalize a client-supplied audio URL.

    Args:
        raw_url: The decoded value of the `target` query parameter

    Returns:
        Tuple of (target, error_reason)
        - (AudioTarget, None) if the target may be fetched; its url may be
          rewritten and its rule is the matching allow-list entry
        - (None, "reason") if the target is rejected
    """
    if not raw_url:
        return None, "empty target"

    try:
        parsed = urllib.parse.urlparse(raw_url.strip())
        hostname = parsed.hostname
        # Raises ValueError for out-of-range ports
        port = parsed.port
    except ValueError as e:
        return None, f"malformed URL: {e}"

    if not parsed.scheme or not hostname:
        return None, "not an absolute URL"

    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        return None, f"scheme not allowed: {scheme}"

    rule = match_audio_host(hostname)
    if rule is None:
        return None, f"host not allowed: {hostname}"

    if rule.force_http:
        parsed = _force_http(parsed, port)
    else:
        parsed = parsed._replace(scheme=scheme)

    return AudioTarget(url=urllib.parse.urlunparse(parsed), rule=rule), None
