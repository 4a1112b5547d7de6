"""
FastAPI app entry point aggregating the routers under insights_api/routes.
Keep as `uvicorn insights_api.api:app`.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import APP_NAME, __version__
from .config import Settings, load_settings
from .db import SqliteStore
from .errors import RepositoryError, ValidationError
from .logs import LogContext, configure_logging
from .models import ApiResponse
from .repository.insight_repo import InsightRepository
from .services.insight_svc import InsightService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
NOT_FOUND_MESSAGE = "The requested API endpoint does not exist"


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.fail(message).model_dump())


def _install_error_handlers(app: FastAPI):
    @app.exception_handler(ValidationError)
    async def on_validation_error(request: Request, exc: ValidationError):
        logger.info("validation failed on %s: %s", request.url.path, exc.message)
        return _envelope(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def on_request_validation_error(request: Request, exc: RequestValidationError):
        logger.info("bad request on %s: %s", request.url.path, exc.errors())
        return _envelope(400, "Invalid request parameters")

    @app.exception_handler(RepositoryError)
    async def on_repository_error(request: Request, exc: RepositoryError):
        logger.error("repository failure on %s [%s]: %s", request.url.path, exc.kind.value, exc.message)
        return _envelope(500, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(StarletteHTTPException)
    async def on_http_error(request: Request, exc: StarletteHTTPException):
        message = NOT_FOUND_MESSAGE if exc.status_code == 404 else str(exc.detail)
        return _envelope(exc.status_code, message)

    @app.exception_handler(Exception)
    async def on_unhandled_error(request: Request, exc: Exception):
        logger.exception("unhandled error on %s", request.url.path)
        return _envelope(500, INTERNAL_ERROR_MESSAGE)


def create_app(settings: Optional[Settings] = None, service: Optional[InsightService] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=APP_NAME, version=__version__)
    app.state.settings = settings
    app.state.insight_service = service or InsightService(
        InsightRepository(SqliteStore(settings.db_path))
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        log = LogContext(request.method, request.url.path)
        try:
            response = await call_next(request)
        except Exception as e:
            # 在 CORS 之内收口成信封，跨域调用方也能读到 500 响应
            logger.exception("unhandled error on %s", request.url.path)
            log.set_status(500)
            log.write("ERROR", str(e))
            return _envelope(500, INTERNAL_ERROR_MESSAGE)
        log.set_status(response.status_code)
        log.write("OK" if response.status_code < 500 else "ERROR")
        return response

    # 最后添加的中间件在最外层：CORS 包住日志中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors.allow_origins),
        allow_methods=list(settings.cors.allow_methods),
        allow_headers=list(settings.cors.allow_headers),
    )

    _install_error_handlers(app)

    # Include routers
    from .routes import base as base_routes
    from .routes import insights as insights_routes

    app.include_router(base_routes.router)
    app.include_router(insights_routes.router)
    return app


app = create_app()
