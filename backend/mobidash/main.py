"""
FastAPI application entry point.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from mobidash.config import Settings, get_settings
from mobidash.core.exceptions import DashboardException
from mobidash.core.log_config import configure_logging
from mobidash.dependencies import build_services, create_http_client
from mobidash.routers import gbfs, health, parking

logger = structlog.get_logger()


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the application.

    Services are created in the lifespan with a fresh HTTP client, unless an
    ``http_client`` is supplied, in which case they are built immediately and
    the caller owns the client.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifecycle manager."""
        configure_logging(settings)
        logger.info("Starting Mobility Dashboard API", version=settings.app_version)

        owned_client = None
        if getattr(app.state, "services", None) is None:
            owned_client = create_http_client(settings)
            app.state.services = build_services(settings, owned_client)

        logger.info("Application startup complete")
        yield

        logger.info("Shutting down Mobility Dashboard API")
        if owned_client is not None:
            await owned_client.aclose()
            app.state.services = None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        lifespan=lifespan,
    )
    app.state.services = build_services(settings, http_client) if http_client else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = f"req_{int(time.time() * 1000)}"
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(DashboardException)
    async def dashboard_exception_handler(request: Request, exc: DashboardException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_code": exc.error_code, **exc.payload},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request parameters", "error_code": "INVALID_REQUEST", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(gbfs.router, prefix=f"{settings.api_prefix}/gbfs", tags=["gbfs"])
    app.include_router(parking.router, prefix=f"{settings.api_prefix}/parking", tags=["parking"])

    # Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    @app.get("/")
    async def root():
        return {
            "message": settings.app_name,
            "version": settings.app_version,
            "docs": f"{settings.api_prefix}/docs",
            "status": "operational",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mobidash.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
        access_log=True,
        log_level="info",
    )
