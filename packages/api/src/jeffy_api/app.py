"""
FastAPI application factory for the Jeffy API.

Start with:
    uvicorn jeffy_api.app:app --reload --port 8000
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError

from jeffy_shared import __version__
from jeffy_shared.config import settings
from jeffy_shared.logging import configure_logging

from jeffy_api.errors import ServiceError
from jeffy_api.middleware.logging import LoggingMiddleware
from jeffy_api.middleware.rate_limit import RateLimitMiddleware
from jeffy_api.responses import error_response
from jeffy_api.routers.admin import admin_router
from jeffy_api.routers.driver import router as driver_router
from jeffy_api.routers.health import router as health_router
from jeffy_api.routers.store import store_router

logger = structlog.get_logger()


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, details=exc.details),
    )


async def _database_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.error("database_error", path=request.url.path, code=exc.code, message=exc.message)
    return JSONResponse(
        status_code=502,
        content=error_response("DATABASE_ERROR", "The database request failed"),
    )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Jeffy API",
        description="Store, delivery, procurement and accounting API for Jeffy",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom middleware (order matters: last added = first executed)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(APIError, _database_error_handler)

    # Routers
    app.include_router(health_router)
    app.include_router(store_router)
    app.include_router(admin_router)
    app.include_router(driver_router)

    logger.info("app_created", cors_origins=settings.cors_origins_list, environment=settings.environment)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("jeffy_api.app:app", host=settings.api_host, port=settings.api_port)
