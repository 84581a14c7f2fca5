"""FastAPI application factory for the ARTA backend.

Wires CORS, the global and burst rate limits (as HTTP middleware), the
route-level limiters' 429 handler, and the auth, feedback and health
routers.  Services are built by ``create_services()`` and handed in, so
tests can pass a container wired to in-memory fakes.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from arta_backend.api.rate_limit import (
    EXEMPT_PATHS,
    RateLimiters,
    RateLimitExceeded,
    client_identifier,
    too_many_requests,
)
from arta_backend.api.routers import auth_router, feedback_router, health_router
from arta_backend.config import AppConfig
from arta_backend.logger import get_logger
from arta_backend.services import ServiceContainer


def create_app(
    services: ServiceContainer,
    config: AppConfig,
    limiters: Optional[RateLimiters] = None,
) -> FastAPI:
    logger = get_logger("api")

    app = FastAPI(title="ARTA backend")
    app.state.services = services
    app.state.limiters = limiters or RateLimiters.from_config(config)

    @app.middleware("http")
    async def global_rate_limits(request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)
        key = client_identifier(request)
        for limiter in (app.state.limiters.global_, app.state.limiters.burst):
            retry_after = limiter.hit(key)
            if retry_after is not None:
                logger.warning(
                    "Rate limit hit for %s on %s", key, request.url.path,
                    extra={"event": "RATE_LIMITED"},
                )
                return too_many_requests(
                    RateLimitExceeded(limiter.message, retry_after, limiter.max_requests),
                )
        return await call_next(request)

    # Added last so it wraps the rate limiter and 429s carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(
            "Rate limit hit for %s on %s", client_identifier(request), request.url.path,
            extra={"event": "RATE_LIMITED"},
        )
        return too_many_requests(exc)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(feedback_router)

    return app
