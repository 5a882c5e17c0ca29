"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fxwidget.api.pages import router as pages_router
from fxwidget.api.v1.router import api_router
from fxwidget.api.v1.endpoints.health import get_health
from fxwidget.core.config import settings
from fxwidget.core.exceptions import setup_exception_handlers
from fxwidget.core.logging import setup_logging, get_logger
from fxwidget.core.rate_limit import limiter
from fxwidget.deps.di_container import create_container, set_container

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Initializes logging and the DI container, and runs the rate refresh task.
    """
    # Startup
    setup_logging()

    container = create_container()
    app.state.container = container
    set_container(container)

    scheduler = container.refresh_scheduler()
    if settings.SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Rate refresh scheduler disabled")

    yield

    # Shutdown
    await scheduler.stop()
    container.widget_service().close()
    await container.http_client().close()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Live currency converter widget API",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health", response_model=None, include_in_schema=False)
    async def root_health(request: Request):
        """Root-level health check endpoint."""
        return await get_health(request)

    # Site pages last so the API routes take precedence
    app.include_router(pages_router)

    # Global exception handler
    setup_exception_handlers(app)

    return app


app = create_app()
