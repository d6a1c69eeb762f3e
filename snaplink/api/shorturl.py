"""Short URL endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, Request, status

from snaplink.api.redirect import is_unreachable_code
from snaplink.core.deps import BaseUrl, StorageDep
from snaplink.core.observability import record_shorturl_operation
from snaplink.core.rate_limit import RATE_LIMIT_API, RATE_LIMIT_CREATE, limiter
from snaplink.schemas import (
    ClickItem,
    ShortUrlCreate,
    ShortUrlCreated,
    ShortUrlDeleted,
    ShortUrlItem,
    ShortUrlStats,
)
from snaplink.services import DuplicateCodeError

logger = structlog.get_logger()

router = APIRouter(prefix="/shorturl", tags=["shorturl"])

# Number of clicks listed in the per-URL stats
RECENT_CLICKS_LIMIT = 10


@router.post("", response_model=ShortUrlCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_CREATE)
async def create_short_url(
    request: Request,
    url_data: ShortUrlCreate,
    storage: StorageDep,
    base_url: BaseUrl,
) -> ShortUrlCreated:
    """Create a new short URL.

    If `code` is provided it is used as-is, otherwise a random one is
    generated. `expiresAt` defaults to 30 days.
    """
    try:
        url = await storage.create_url(url_data)
    except DuplicateCodeError as e:
        logger.info("Short code already taken", code=e.code)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    logger.info(
        "Short URL created",
        url_id=str(url.id),
        code=url.code,
        expires_at=url.expires_at.isoformat() if url.expires_at else None,
    )
    if is_unreachable_code(request.app, url.code):
        logger.warning("Short URL can never redirect", code=url.code)
    record_shorturl_operation("create")
    return ShortUrlCreated(
        original_url=url.original_url,
        short_url=f"{base_url}/{url.code}",
        code=url.code,
        created_at=url.created_at,
    )


@router.get("", response_model=list[ShortUrlItem])
@limiter.limit(RATE_LIMIT_API)
async def list_short_urls(
    request: Request,
    storage: StorageDep,
    base_url: BaseUrl,
) -> list[ShortUrlItem]:
    """List every non-expired short URL, newest first."""
    urls = await storage.get_all_urls()
    return [
        ShortUrlItem(
            code=url.code,
            original_url=url.original_url,
            short_url=f"{base_url}/{url.code}",
            clicks=url.clicks,
            created_at=url.created_at,
            expires_at=url.expires_at,
        )
        for url in urls
    ]


@router.get("/{code}/stats", response_model=ShortUrlStats)
@limiter.limit(RATE_LIMIT_API)
async def get_short_url_stats(
    request: Request,
    code: str,
    storage: StorageDep,
) -> ShortUrlStats:
    """Get click statistics for a short URL."""
    url = await storage.get_url_by_code(code)
    if not url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="URL not found",
        )

    clicks = await storage.get_clicks_by_url_id(url.id)

    return ShortUrlStats(
        code=url.code,
        original_url=url.original_url,
        total_clicks=url.clicks,
        created_at=url.created_at,
        expires_at=url.expires_at,
        recent_clicks=[
            ClickItem(timestamp=click.timestamp)
            for click in clicks[:RECENT_CLICKS_LIMIT]
        ],
    )


@router.delete("/{code}", response_model=ShortUrlDeleted)
@limiter.limit(RATE_LIMIT_API)
async def delete_short_url(
    request: Request,
    code: str,
    storage: StorageDep,
) -> ShortUrlDeleted:
    """Delete a short URL together with its recorded clicks."""
    deleted = await storage.delete_url(code)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="URL not found",
        )

    logger.info("Short URL deleted", code=code)
    record_shorturl_operation("delete")
    return ShortUrlDeleted(message="URL deleted successfully", code=code)
