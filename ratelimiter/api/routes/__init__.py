from __future__ import annotations

from ratelimiter.api.routes.health import router as health_router
from ratelimiter.api.routes.rate_limit import router as rate_limit_router

__all__ = ["health_router", "rate_limit_router"]
