"""Collection configuration models."""

import enum

from pydantic import BaseModel, Field


class TitleMatching(str, enum.Enum):
    """Title-based duplicate suppression strictness.

    EXACT treats two articles of one keyword with the same normalized title
    as duplicates even across sources. Distinct articles sharing a title
    collide; OFF disables title matching so only URLs are compared.
    """

    EXACT = "exact"
    OFF = "off"


class DedupConfig(BaseModel):
    """Deduplication configuration.

    Attributes:
        title_matching: Title matching strictness
        strip_query_params: Query parameters removed during URL normalization
    """

    title_matching: TitleMatching = Field(default=TitleMatching.EXACT)
    strip_query_params: list[str] = Field(
        default_factory=lambda: ["ref", "fbclid", "gclid", "source"],
        description="Query params dropped in addition to utm_*",
    )


class CollectionConfig(BaseModel):
    """Collection run configuration.

    Attributes:
        lookback_days: Sources are searched from now minus this window
        debug_article_limit: Default per-source cap for debug jobs
    """

    lookback_days: int = Field(default=30, ge=1, le=365)
    debug_article_limit: int = Field(default=3, ge=1, le=100)


__all__ = [
    "TitleMatching",
    "DedupConfig",
    "CollectionConfig",
]
