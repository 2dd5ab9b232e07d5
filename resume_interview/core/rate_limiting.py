"""Rate limiting configuration using slowapi.

Security: Prevents API abuse and LLM cost explosion by limiting how often
a client can submit interview turns. Every turn may cost one backend call.

The counter store is injected through RATE_LIMIT_STORAGE_URI. The default
in-memory store suits a single instance; point it at Redis or Memcached
when several instances share traffic.

Usage in routers:
    from resume_interview.core.rate_limiting import limiter

    @router.post("/turns")
    @limiter.limit(settings.rate_limit_turns)
    async def submit_turn(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from resume_interview.core.config import settings

# Global limiter instance, keyed on the client address.
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
    storage_uri=settings.rate_limit_storage_uri,
)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Security: Returns 429 Too Many Requests with standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    # Detail looks like "20 per 1 minute"; fall back to 60 seconds.
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Rate limit exceeded: {exc.detail}",
            }
        },
        headers={"Retry-After": retry_after},
    )
