"""Feed Planner backend - FastAPI entry point."""
import logging
import sys

# asyncpg is incompatible with Windows ProactorEventLoop (default on Windows).
# Must be set before any asyncio usage.
if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI

from feedplanner.config import settings
from feedplanner.database import engine
from feedplanner.utils.redis_client import close_redis
from feedplanner.middleware.cors import setup_cors
from feedplanner.middleware.error_handler import setup_error_handlers
from feedplanner.middleware.logging_middleware import LoggingMiddleware
from feedplanner.middleware.metrics import MetricsMiddleware, setup_metrics
from feedplanner.api.v1 import accounts as accounts_router
from feedplanner.api.v1 import auth as auth_router
from feedplanner.api.v1 import comments as comments_router
from feedplanner.api.v1 import posts as posts_router
from feedplanner.api.v1 import users as users_router
from feedplanner.api.v1 import workspaces as workspaces_router

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    """Route stdlib and structlog output through one root logger at ``level``."""
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.APP_ENV == "development"
            else structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info("startup", env=settings.APP_ENV)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("shutdown")


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    application = FastAPI(
        title="Feed Planner API",
        description="Social media content planning with internal review and client approval",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Middleware (order matters: last added = first executed)
    setup_cors(application)
    setup_error_handlers(application)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(MetricsMiddleware)

    setup_metrics(application)

    # API Routers
    application.include_router(auth_router.router, prefix="/api/v1/auth", tags=["Auth"])
    application.include_router(users_router.router, prefix="/api/v1/users", tags=["Users"])
    application.include_router(workspaces_router.router, prefix="/api/v1/workspaces", tags=["Workspaces"])
    application.include_router(accounts_router.router, prefix="/api/v1/accounts", tags=["Accounts"])
    application.include_router(posts_router.router, prefix="/api/v1/posts", tags=["Posts"])
    application.include_router(comments_router.router, prefix="/api/v1/posts", tags=["Comments"])

    # Health check
    @application.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
