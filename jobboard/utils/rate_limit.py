"""
Per-IP request limits (slowapi).

Every route is charged to the general API budget through the app-wide
``api_rate_limit`` dependency; auth and apply routes are decorated with
their own, stricter limits on top of it.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from jobboard.config import settings
from jobboard.utils.errors import ApiError

API_LIMIT = "100 per 15 minutes"
AUTH_LIMIT = "5 per 15 minutes"
APPLICATION_LIMIT = "10 per hour"

API_LIMIT_MESSAGE = "Too many API requests from this IP, please try again later."
AUTH_LIMIT_MESSAGE = "Too many authentication attempts from this IP, please try again after 15 minutes."
APPLICATION_LIMIT_MESSAGE = "Too many job applications from this IP, please try again after 1 hour."

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)

# One counter shared by every auth endpoint
auth_limit = limiter.shared_limit(AUTH_LIMIT, scope="auth", error_message=AUTH_LIMIT_MESSAGE)
application_limit = limiter.limit(APPLICATION_LIMIT, error_message=APPLICATION_LIMIT_MESSAGE)

general_limit = parse(API_LIMIT)


async def api_rate_limit(request: Request):
    """App-wide dependency: charge the request to the caller's general budget."""
    if not limiter.enabled:
        return
    # Same storage as the decorated limits, so limiter.reset() clears it too
    if not limiter.limiter.hit(general_limit, get_remote_address(request), "api"):
        raise ApiError(API_LIMIT_MESSAGE, status_code=429)


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a fixed message when a decorated limit is exceeded."""
    message = exc.detail
    if message not in (AUTH_LIMIT_MESSAGE, APPLICATION_LIMIT_MESSAGE):
        message = API_LIMIT_MESSAGE
    return JSONResponse(status_code=429, content={"status": "fail", "message": message})
