"""FastAPI application entry point."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.routes import health, optimization, routes
from .config import Settings, get_settings
from .db.supabase import get_supabase_client
from .persistence.database import RouteStore

INVALID_ENDPOINT = {"error": "Invalid endpoint or method"}


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unmatched paths and methods share one 404 body.
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED or (
            exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found"
        ):
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=INVALID_ENDPOINT)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": jsonable_errors(exc)},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def create_app(settings: Optional[Settings] = None, route_store: Optional[RouteStore] = None) -> FastAPI:
    """Build the application.

    Settings are validated here, once: without an explicit ``route_store`` the
    Supabase URL and key must be configured or ``ConfigurationError`` is raised.
    """
    settings = settings or get_settings()
    _configure_logging(settings)
    if route_store is None:
        route_store = RouteStore(get_supabase_client(settings))

    app = FastAPI(title=settings.app_name, root_path="")
    app.state.settings = settings
    app.state.route_store = route_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=list(settings.cors_allowed_headers),
    )
    preflight_headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, PATCH, OPTIONS",
        "Access-Control-Allow-Headers": ", ".join(settings.cors_allowed_headers),
    }

    # Added last, so it wraps CORSMiddleware. Any OPTIONS request gets an empty 200.
    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=preflight_headers)
        return await call_next(request)

    _register_error_handlers(app)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(optimization.router, prefix=settings.api_prefix)
    app.include_router(optimization.scheduler_router, prefix=settings.api_prefix)
    app.include_router(routes.router, prefix=settings.api_prefix)
    return app
