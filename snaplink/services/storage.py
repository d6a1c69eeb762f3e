"""In-memory storage for short URLs and their clicks."""

import asyncio
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import structlog

from snaplink.models import Click, Url
from snaplink.schemas import ExpiryToken, ShortUrlCreate

logger = structlog.get_logger()

# Base62 minus look-alikes (0/O, 1/l/I)
SHORT_CODE_CHARS = "23456789abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ"
SHORT_CODE_LENGTH = 8

EXPIRY_DURATIONS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "1y": timedelta(days=365),
}


class StorageError(Exception):
    """Base class for storage failures."""


class DuplicateCodeError(StorageError):
    """Raised when a requested short code is already stored."""

    def __init__(self, code: str) -> None:
        super().__init__("Short code already exists")
        self.code = code


class CodeGenerationError(StorageError):
    """Raised when no free random code could be found."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Generate a random short code from the unambiguous alphabet."""
    return "".join(secrets.choice(SHORT_CODE_CHARS) for _ in range(length))


def resolve_expiry(token: ExpiryToken | None, now: datetime) -> datetime | None:
    """Turn an expiry token into a concrete timestamp (None = never)."""
    if token is None or token == "never":
        return None
    return now + EXPIRY_DURATIONS[token]


class MemStorage:
    """Owns every Url and Click record.

    Urls are indexed by code and by id. Expired Urls stay stored (and keep
    their code occupied) but are hidden from lookups and listings.

    All public methods serialize on one lock so that code allocation and
    counter updates stay consistent across concurrent requests.

    Usage:
        storage = MemStorage()
        url = await storage.create_url(ShortUrlCreate(original_url="https://example.com"))
        await storage.increment_clicks(url.code)
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        max_code_attempts: int = 10,
    ) -> None:
        self._clock = clock
        self._max_code_attempts = max_code_attempts
        self._urls: dict[UUID, Url] = {}
        self._urls_by_code: dict[str, Url] = {}
        self._clicks: dict[UUID, Click] = {}
        self._lock = asyncio.Lock()

    def _find_active(self, code: str) -> Url | None:
        """Look up a code, hiding expired rows (lock must be held)."""
        url = self._urls_by_code.get(code)
        if url is None or url.is_expired(self._clock()):
            return None
        return url

    def _allocate_code(self, requested: str | None) -> str:
        """Pick the code for a new Url (lock must be held)."""
        if requested:
            if requested in self._urls_by_code:
                raise DuplicateCodeError(requested)
            return requested

        for _ in range(self._max_code_attempts):
            code = generate_short_code()
            if code not in self._urls_by_code:
                return code
        raise CodeGenerationError("Unable to generate unique short code")

    # URL operations

    async def create_url(self, data: ShortUrlCreate) -> Url:
        """Store a new Url and return it."""
        async with self._lock:
            code = self._allocate_code(data.code)
            now = self._clock()
            url = Url(
                id=uuid4(),
                code=code,
                original_url=data.original_url,
                created_at=now,
                expires_at=resolve_expiry(data.expires_at, now),
            )
            self._urls[url.id] = url
            self._urls_by_code[code] = url

        logger.debug("Url stored", code=code, url_id=str(url.id))
        return url

    async def get_url_by_code(self, code: str) -> Url | None:
        """Get a non-expired Url by its code."""
        async with self._lock:
            return self._find_active(code)

    async def get_all_urls(self) -> list[Url]:
        """Get every non-expired Url, newest first."""
        async with self._lock:
            now = self._clock()
            urls = [url for url in self._urls.values() if not url.is_expired(now)]
        # Reversed first so that ties keep the latest insertion on top
        return sorted(reversed(urls), key=lambda url: url.created_at, reverse=True)

    async def delete_url(self, code: str) -> bool:
        """Delete a non-expired Url and all of its clicks.

        Returns whether anything was deleted.
        """
        async with self._lock:
            url = self._find_active(code)
            if url is None:
                return False

            click_ids = [
                click_id
                for click_id, click in self._clicks.items()
                if click.url_id == url.id
            ]
            for click_id in click_ids:
                del self._clicks[click_id]

            del self._urls[url.id]
            del self._urls_by_code[url.code]

        logger.debug("Url deleted", code=code, clicks_deleted=len(click_ids))
        return True

    async def increment_clicks(self, code: str) -> None:
        """Bump the click counter of a non-expired Url; no-op if missing."""
        async with self._lock:
            url = self._find_active(code)
            if url:
                url.clicks += 1

    # Click tracking

    async def record_click(
        self,
        url_id: UUID,
        referrer: str | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> Click:
        """Append a Click row. `url_id` is not checked against stored Urls."""
        async with self._lock:
            click = Click(
                id=uuid4(),
                url_id=url_id,
                timestamp=self._clock(),
                referrer=referrer,
                user_agent=user_agent,
                ip_address=ip_address,
            )
            self._clicks[click.id] = click
        return click

    async def get_clicks_by_url_id(self, url_id: UUID) -> list[Click]:
        """Get all clicks for a Url id, newest first."""
        async with self._lock:
            clicks = [click for click in self._clicks.values() if click.url_id == url_id]
        return sorted(reversed(clicks), key=lambda click: click.timestamp, reverse=True)

    # Statistics

    async def get_total_urls(self) -> int:
        """Count every stored Url, expired ones included."""
        async with self._lock:
            return len(self._urls)

    async def get_total_clicks(self) -> int:
        """Count every stored Click."""
        async with self._lock:
            return len(self._clicks)

    async def get_active_urls(self) -> int:
        """Count Urls that never expire or have not expired yet."""
        async with self._lock:
            now = self._clock()
            return sum(1 for url in self._urls.values() if not url.is_expired(now))

    @property
    def stats(self) -> dict:
        """Get raw row counts."""
        return {
            "urls_stored": len(self._urls),
            "clicks_stored": len(self._clicks),
        }
