"""Service-wide statistics endpoint."""

from decimal import ROUND_HALF_UP, Decimal

from fastapi import APIRouter, Request

from snaplink.core.deps import StorageDep
from snaplink.core.rate_limit import RATE_LIMIT_API, limiter
from snaplink.schemas import OverviewStats

router = APIRouter(tags=["stats"])


def average_click_rate(total_clicks: int, total_urls: int) -> str:
    """Clicks per URL with one decimal, "0.0" when there are no URLs.

    Ties round up on the exact binary value of the ratio (0.25 -> "0.3").
    """
    if total_urls <= 0:
        return "0.0"
    rate = Decimal(total_clicks / total_urls)
    return str(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@router.get("/stats", response_model=OverviewStats)
@limiter.limit(RATE_LIMIT_API)
async def get_overview_stats(request: Request, storage: StorageDep) -> OverviewStats:
    """Get totals across all short URLs.

    `totalUrls` includes expired URLs that have not been deleted, while
    `activeUrls` does not.
    """
    total_urls = await storage.get_total_urls()
    total_clicks = await storage.get_total_clicks()
    active_urls = await storage.get_active_urls()

    return OverviewStats(
        total_urls=total_urls,
        total_clicks=total_clicks,
        active_urls=active_urls,
        avg_click_rate=average_click_rate(total_clicks, total_urls),
    )
