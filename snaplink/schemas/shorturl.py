"""Short URL Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

CODE_PATTERN = r"^[a-zA-Z0-9]{5,10}$"

ExpiryToken = Literal["never", "1h", "24h", "7d", "30d", "1y"]

DEFAULT_EXPIRY: ExpiryToken = "30d"

# Any scheme, no length cap: long URLs are what gets shortened
_absolute_url = TypeAdapter(AnyUrl)


class CamelModel(BaseModel):
    """Base schema exchanged with the frontend in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortUrlCreate(CamelModel):
    """Schema for creating a new short URL."""

    original_url: str = Field(description="The URL to shorten")
    code: str | None = Field(
        default=None,
        pattern=CODE_PATTERN,
        description="Optional custom code (5-10 letters or digits)",
    )
    expires_at: ExpiryToken | None = Field(
        default=DEFAULT_EXPIRY,
        description="How long the short URL stays valid",
    )

    @field_validator("original_url")
    @classmethod
    def validate_original_url(cls, v: str) -> str:
        """Require a syntactically valid absolute URL but keep it exactly as given."""
        v = v.strip()
        try:
            _absolute_url.validate_python(v)
        except ValidationError:
            raise ValueError("Invalid URL format") from None
        return v

    @field_validator("code", mode="before")
    @classmethod
    def blank_code_is_none(cls, v: object) -> object:
        """Treat an empty code field as "generate one for me"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ShortUrlCreated(BaseModel):
    """Schema for the create response."""

    original_url: str
    short_url: str
    code: str
    created_at: datetime


class ShortUrlItem(CamelModel):
    """Schema for one entry of the short URL listing."""

    code: str
    original_url: str
    short_url: str
    clicks: int
    created_at: datetime
    expires_at: datetime | None


class ClickItem(CamelModel):
    """A single recorded click."""

    timestamp: datetime


class ShortUrlStats(CamelModel):
    """Per-URL click statistics."""

    code: str
    original_url: str
    total_clicks: int
    created_at: datetime
    expires_at: datetime | None
    recent_clicks: list[ClickItem]


class ShortUrlDeleted(CamelModel):
    """Schema for the delete response."""

    message: str
    code: str


class OverviewStats(CamelModel):
    """Service-wide statistics."""

    total_urls: int
    total_clicks: int
    active_urls: int
    avg_click_rate: str
