"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def get_real_client_ip(request: Request) -> str:
    """Get the real client IP address, handling proxies.

    Checks X-Forwarded-For and X-Real-IP headers before falling back
    to the direct client address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs: client, proxy1, proxy2
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# Counters live in process memory like the rest of the service state;
# `create_app` switches the limiter on or off from its settings.
limiter = Limiter(
    key_func=get_real_client_ip,
    storage_uri="memory://",
    strategy="fixed-window",
)

# Redirects are the hot path
RATE_LIMIT_REDIRECT = "1000/minute"

# Link creation - prevent spam/abuse
RATE_LIMIT_CREATE = "60/hour"

# General API endpoints
RATE_LIMIT_API = "100/minute"
