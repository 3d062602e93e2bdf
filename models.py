"""Request-scoped and configuration models."""

from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class AudioHostRule(BaseModel):
    """One entry of the audio host allow-list.

    A hostname matches when it equals `domain` or is a subdomain of it.
    """

    model_config = ConfigDict(frozen=True)

    domain: str
    # Origin does not reliably serve over TLS
    force_http: bool = False
    # Sent upstream for hosts that reject hotlinked requests
    referer: Optional[str] = None


class AudioTarget(BaseModel):
    """A validated audio URL and the allow-list rule that admitted it."""

    model_config = ConfigDict(frozen=True)

    url: str
    rule: AudioHostRule


class MetadataQuery(BaseModel):
    """Meting-style public query parameters."""

    model_config = ConfigDict(frozen=True)

    types: Optional[str] = None
    name: Optional[str] = None
    id: Optional[str] = None
    source: Optional[str] = None
    auth: Optional[str] = Field(default=None, repr=False)

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "MetadataQuery":
        """Build a query from the inbound URL parameters, ignoring unknown keys."""
        return cls(
            types=params.get("types"),
            name=params.get("name"),
            id=params.get("id"),
            source=params.get("source"),
            auth=params.get("auth"),
        )
