"""FastAPI application for slotwise."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slotwise import __version__
from slotwise.api.middleware import RequestLoggingMiddleware
from slotwise.api.routes import appointments, health, queue, services, staff
from slotwise.config import get_settings
from slotwise.scheduling.errors import BadRequestError, SchedulingError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting slotwise API")

    settings = get_settings()
    if settings.auto_create_tables:
        from slotwise.core.database import init_db

        await init_db()

    logger.info("slotwise API started successfully")

    yield

    logger.info("Shutting down slotwise API")
    from slotwise.core.database import close_db

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="slotwise API",
        description="Staff scheduling and waiting-queue engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(appointments.router, prefix="/api/v1")
    app.include_router(queue.router, prefix="/api/v1")
    app.include_router(staff.router, prefix="/api/v1")
    app.include_router(services.router, prefix="/api/v1")

    @app.exception_handler(SchedulingError)
    async def scheduling_exception_handler(request: Request, exc: SchedulingError):
        if exc.status_code >= 500:
            logger.error(f"Scheduling failure: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "detail": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=BadRequestError.status_code,
            content={"error": BadRequestError.kind, "detail": problems},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.debug_mode else None,
            },
        )

    return app
