"""Application lifecycle management.

Rules are loaded and the counter store is built on startup, so an invalid
rule configuration aborts startup instead of failing every decision request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ratelimiter.core.config import settings
from ratelimiter.core.rate_limit import get_rate_limit_service, reset_rate_limit_service

logger = logging.getLogger(__name__)


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the rate limit service on startup and close the store on shutdown.

        Raises:
            ConfigurationAppError: If the rule configuration is invalid.
        """
        service = get_rate_limit_service()
        logger.info(
            "application_startup",
            extra={"app_env": settings.app_env, "rule_count": len(service.rules)},
        )

        yield

        reset_rate_limit_service()
        logger.info("application_shutdown", extra={"app_env": settings.app_env})

    return lifespan
