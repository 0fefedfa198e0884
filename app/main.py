"""
FastAPI application entrypoint for the Virgil backend.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.services.errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind is ErrorKind.PROVIDER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = sorted(
        {".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()}
    )
    message = "Invalid request body"
    if fields:
        message = f"{message}: {', '.join(fields)}"
    return JSONResponse(
        status_code=HTTPStatus.BAD_REQUEST,
        content={"error": ErrorKind.INVALID_INPUT.value, "message": message},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Virgil Backend",
        version="0.1.0",
        description=(
            "Session assistant endpoints and Google Calendar sync for action items."
        ),
    )
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(api_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"status": "Virgil Backend API is running"}

    return app


app = create_app()

__all__ = ["app", "create_app"]
