"""HTTP routers."""

from snaplink.api.redirect import router as redirect_router
from snaplink.api.router import router as api_router

__all__ = ["api_router", "redirect_router"]
