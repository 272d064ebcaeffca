"""FastAPI application exposing the content functions."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response

from verdant.api.routes import error_response, router
from verdant.config import Settings, get_settings
from verdant.errors import InvalidParameter
from verdant.log import configure_logging
from verdant.services import Services

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE, PATCH",
    "Access-Control-Max-Age": "86400",
}


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("API startup complete (store backend: %s)", settings.store_backend)
        yield
        app.state.services.close()
        logger.info("API shutdown complete")

    app = FastAPI(
        title="Verdant",
        description="Agent-driven content generation and approval",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services or Services(settings)

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        start = time.monotonic()
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        logger.debug(
            "%s %s -> %d (%.0fms)",
            request.method, request.url.path, response.status_code,
            (time.monotonic() - start) * 1000,
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        return error_response("INVALID_REQUEST", InvalidParameter(str(first.get("msg", exc))))

    @app.get("/health")
    def health() -> dict:
        return {"status": "healthy", "store_backend": settings.store_backend, "version": "0.1.0"}

    app.include_router(router)
    return app
