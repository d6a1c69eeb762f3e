"""Url record held by the in-memory store."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class Url:
    """A shortened URL.

    `clicks` is a denormalized counter kept alongside the Click rows; the two
    are bumped together on redirect and never reconciled.
    """

    id: UUID
    code: str
    original_url: str
    created_at: datetime
    expires_at: datetime | None = None
    clicks: int = 0

    def __repr__(self) -> str:
        return f"<Url {self.code} -> {self.original_url[:50]}>"

    def is_expired(self, now: datetime) -> bool:
        """Check if the URL has expired as of `now`."""
        if self.expires_at is None:
            return False
        return now > self.expires_at
