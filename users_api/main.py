"""
Application wiring.

``create_app`` builds the FastAPI application.  The database, the
repository and the service are created in the lifespan handler and
live on ``app.state`` until shutdown, when the engine is disposed.
Run it with::

    uvicorn users_api.main:app

or through the ``users-api`` console script.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_api.config import Settings, get_settings
from users_api.database import Database
from users_api.handlers import health_router, router as users_router
from users_api.logging_config import setup_logging
from users_api.repository import SqlUserRepository
from users_api.service import DefaultUserService

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages) or "Invalid request"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database.from_settings(settings)
        database.migrate()
        app.state.database = database
        app.state.user_service = DefaultUserService(SqlUserRepository(database.session_factory))
        logger.info("%s ready on %s", settings.project_name, settings.api_prefix)
        try:
            yield
        finally:
            database.dispose()
            logger.info("Database connections released")

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        description="CRUD API for users backed by a relational table",
        docs_url="/swagger",
        openapi_url="/swagger/openapi.json",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(users_router, prefix=settings.api_prefix)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _describe_validation_error(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
