"""Redirect endpoint for short codes."""

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from snaplink.api.frontend import serve_frontend
from snaplink.core.deps import SettingsDep, StorageDep
from snaplink.core.observability import record_redirect
from snaplink.core.rate_limit import RATE_LIMIT_REDIRECT, get_real_client_ip, limiter

logger = structlog.get_logger()

router = APIRouter(tags=["redirect"])

# Single-segment paths owned by the frontend dev tooling
RESERVED_PATHS = frozenset({"src", "@vite", "@fs", "node_modules"})


def is_reserved_path(code: str) -> bool:
    """Whether a path segment can never be a short code lookup."""
    return code.startswith("api") or "." in code or code in RESERVED_PATHS


def is_unreachable_code(app: FastAPI, code: str) -> bool:
    """Whether `/{code}` would never reach the redirect endpoint.

    True for reserved segments and for codes shadowed by an earlier route
    such as `/docs` or `/metrics`.
    """
    if is_reserved_path(code):
        return True
    return any(getattr(route, "path", None) == f"/{code}" for route in app.routes)


@router.get("/", include_in_schema=False)
async def index(request: Request, settings: SettingsDep) -> Response:
    """Frontend entry page, or a welcome message when running API-only."""
    if request.app.state.frontend is None:
        return JSONResponse(
            {"message": f"Welcome to {settings.app_name}", "version": settings.app_version}
        )
    return await serve_frontend(request, "index.html")


@router.get("/{code}", include_in_schema=False)
@limiter.limit(RATE_LIMIT_REDIRECT)
async def redirect_to_original(
    request: Request,
    code: str,
    storage: StorageDep,
) -> Response:
    """Redirect a short code to its original URL.

    Reserved, unknown and expired codes are not errors here: they fall
    through to the frontend so the app can render its own page.
    """
    if is_reserved_path(code):
        return await serve_frontend(request, code)

    url = await storage.get_url_by_code(code)
    if not url:
        logger.info("Redirect skipped - code not found", code=code)
        return await serve_frontend(request, code)

    await storage.increment_clicks(code)
    await storage.record_click(
        url.id,
        referrer=request.headers.get("Referer"),
        user_agent=request.headers.get("User-Agent"),
        ip_address=get_real_client_ip(request),
    )

    logger.info("Redirect", code=code, url_id=str(url.id))
    record_redirect(status.HTTP_302_FOUND)

    return RedirectResponse(
        url=url.original_url,
        status_code=status.HTTP_302_FOUND,
    )
