"""FastAPI application factory. No business logic; only wiring and middleware.

Run with: uvicorn blog_api.main:create_app --factory
"""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from blog_api.api.v1 import router as v1_router
from blog_api.core.config import Settings, get_settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.errors import register_exception_handlers
from blog_api.core.logging import configure_logging
from blog_api.core.rate_limit import FixedWindowRateLimiter, RateLimiter, RateLimitMiddleware
from blog_api.core.security import TokenCodec
from blog_api.core.security_headers import SecurityHeadersMiddleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """
    Build the application from an explicit Settings object.

    Fails with TokenSecretMissing when either JWT secret is not configured.
    """
    if settings is None:
        load_dotenv()
        settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    token_codec = TokenCodec.from_settings(settings)
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    app = FastAPI(
        title="Blog API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.token_codec = token_codec
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    register_exception_handlers(app, settings)

    # Last added runs first. GZip must sit inside the BaseHTTPMiddleware
    # layers: they re-stream the body in chunks, which defeats minimum_size.
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=rate_limiter
        or FixedWindowRateLimiter(
            settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SEC
        ),
    )
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else settings.WHITELIST_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    logger.info("Application configured", extra={"environment": settings.APP_ENV})
    return app
