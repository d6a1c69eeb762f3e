"""Click record held by the in-memory store."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Click:
    """A single visit to a shortened URL.

    Clicks are never mutated; they go away only when their Url is deleted.
    """

    id: UUID
    url_id: UUID
    timestamp: datetime
    referrer: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None

    def __repr__(self) -> str:
        return f"<Click {self.id} url={self.url_id} at={self.timestamp}>"
