"""Pydantic schemas."""

from snaplink.schemas.shorturl import (
    CODE_PATTERN,
    DEFAULT_EXPIRY,
    ClickItem,
    ExpiryToken,
    OverviewStats,
    ShortUrlCreate,
    ShortUrlCreated,
    ShortUrlDeleted,
    ShortUrlItem,
    ShortUrlStats,
)

__all__ = [
    "CODE_PATTERN",
    "DEFAULT_EXPIRY",
    "ClickItem",
    "ExpiryToken",
    "OverviewStats",
    "ShortUrlCreate",
    "ShortUrlCreated",
    "ShortUrlDeleted",
    "ShortUrlItem",
    "ShortUrlStats",
]
