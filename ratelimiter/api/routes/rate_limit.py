import logging

from fastapi import APIRouter, Depends, Response, status

from ratelimiter.core.config import settings
from ratelimiter.core.rate_limit import get_rate_limit_service
from ratelimiter.schemas.rate_limit import RateLimitRequest
from ratelimiter.services.rate_limit_service import RateLimitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ratelimit", tags=["RateLimit"])


@router.post(
    "/fixedwindow",
    status_code=status.HTTP_200_OK,
    responses={429: {"description": "At least one descriptor exceeded its rule."}},
)
def should_rate_limit(
    body: RateLimitRequest,
    service: RateLimitService = Depends(get_rate_limit_service),
) -> Response:
    """Decide whether a request described by ``descriptors`` is admitted.

    Returns 200 with an empty body when admitted and 429 when any descriptor
    exceeds its fixed-window rule. Store failures are reported through the
    global exception handlers (503/500), never as a silent admit.
    """
    if not settings.app.rate_limit_enabled:
        logger.debug("rate_limit.disabled")
        return Response(status_code=status.HTTP_200_OK)

    if service.should_limit(body.descriptors):
        return Response(status_code=status.HTTP_429_TOO_MANY_REQUESTS)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/fixedwindow", status_code=status.HTTP_200_OK)
def fixed_window_status() -> Response:
    """Lets clients check that the fixed-window endpoint is reachable."""
    return Response(status_code=status.HTTP_200_OK)
