"""API router - aggregates all /api endpoints."""

from fastapi import APIRouter

from snaplink.api.shorturl import router as shorturl_router
from snaplink.api.stats import router as stats_router

router = APIRouter(prefix="/api")

# Include sub-routers
router.include_router(shorturl_router)
router.include_router(stats_router)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
