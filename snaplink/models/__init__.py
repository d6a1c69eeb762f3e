"""In-memory record types."""

from snaplink.models.click import Click
from snaplink.models.url import Url

__all__ = ["Click", "Url"]
