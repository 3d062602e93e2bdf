"""Immutable runtime settings, loaded once from the environment."""

import logging
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

import config
from models import AudioHostRule

logger = logging.getLogger(__name__)

# Audio hosts that may be proxied via `target`. Closed enumeration, not configurable.
# Each rule admits the domain itself and its subdomains only.
AUDIO_HOST_RULES: Tuple[AudioHostRule, ...] = (
    AudioHostRule(domain="kuwo.cn", force_http=True, referer="https://www.kuwo.cn/"),
    AudioHostRule(domain="music.126.net"),
    AudioHostRule(domain="qq.com"),
)


class Settings(BaseModel):
    """Gateway settings shared by every request."""

    model_config = ConfigDict(frozen=True)

    # Upstream Meting API
    api_base_url: str = Field(default="https://api.i-meto.com/meting/api", min_length=1)
    auth_secret: str = Field(default="meting-secret", min_length=1, repr=False)
    default_source: str = Field(default="netease", min_length=1)
    verify_client_auth: bool = False

    # Upstream HTTP
    fallback_user_agent: str = Field(default="Mozilla/5.0", min_length=1)
    upstream_timeout: float = Field(default=30.0, gt=0, le=600)

    # Response caching hints
    metadata_cache_control: str = "no-store"
    audio_cache_control: str = "public, max-age=3600"

    # Audio
    audio_hosts: Tuple[AudioHostRule, ...] = AUDIO_HOST_RULES


# In-memory cached settings
_cached_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get current settings (cached in memory)."""
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = load_settings()
    return _cached_settings


def load_settings() -> Settings:
    """Build settings from the startup configuration."""
    s = Settings(
        api_base_url=config.METING_API_BASE_URL,
        auth_secret=config.METING_AUTH_SECRET,
        default_source=config.DEFAULT_SOURCE,
        verify_client_auth=config.VERIFY_CLIENT_AUTH,
        fallback_user_agent=config.FALLBACK_USER_AGENT,
        upstream_timeout=config.UPSTREAM_TIMEOUT,
    )
    logger.info(
        f"Settings loaded: api={s.api_base_url} default_source={s.default_source} "
        f"timeout={s.upstream_timeout}s verify_client_auth={s.verify_client_auth}"
    )
    return s

