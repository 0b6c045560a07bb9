"""
FastAPI application entry point.

Configures application lifespan, logging, error handlers, caller identity,
health check, and API routes.
Initializes database tables only in development mode; production relies on migrations.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.v1.endpoints import router as v1_router
from app.core.config import settings
from app.core.dependencies import engine
from app.core.errors import ConversationError
from app.core.identity import IdentityMiddleware
from app.models.schemas import ErrorResponse
from app.persistence.database import init_models

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context.

    Configures logging and initializes database tables in development mode.
    No explicit shutdown actions are required as connections are managed elsewhere.
    """
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.environment.lower() == "development":
        await init_models(engine)

    yield


async def conversation_error_handler(request: Request, exc: ConversationError) -> JSONResponse:
    """Render domain errors as {"message": "ERROR", "cause": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(cause=exc.cause).model_dump(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(cause="An unexpected error occurred").model_dump(),
    )


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application instance."""
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    if settings.identity_header:
        app.add_middleware(IdentityMiddleware, header_name=settings.identity_header)
    app.add_exception_handler(ConversationError, conversation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    def health():
        """Simple health check endpoint."""
        return {"status": "ok"}

    app.include_router(v1_router)
    return app


app = create_app()
