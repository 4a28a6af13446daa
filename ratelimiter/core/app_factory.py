"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from ratelimiter.api.routes import health_router, rate_limit_router
from ratelimiter.core.config import settings
from ratelimiter.core.exception_handlers import setup_exception_handlers
from ratelimiter.core.lifecycle import create_lifespan_manager
from ratelimiter.core.logging import configure_logging
from ratelimiter.core.middleware import request_id_middleware
from ratelimiter.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Fixed Window Rate Limiter",
        description=(
            "Decides whether a batch of request descriptors (account id, client "
            "IP, request type) is admitted or rejected under configured "
            "fixed-window rules. Counters live in a shared Redis store so every "
            "instance of the service makes the same decision."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=create_lifespan_manager(),
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(rate_limit_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
