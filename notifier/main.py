# notifier/main.py
"""
Notification API.

Startup builds the text-repair service once and keeps it on app.state,
together with the interceptor that repairs notification responses.
"""

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notifier import __version__
from notifier.config import Settings, get_settings
from notifier.database import init_db
from notifier.logging_config import configure_logging
from notifier.routers import notifications_router, text_router
from notifier.services.text_repair import ResponseInterceptor
from notifier.services.text_repair.factory import build_text_repair_service

logger = logging.getLogger(__name__)

SERVICE_NAME = "notification-api"


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation Error",
            "message": "Invalid input data",
            "details": [_format_validation_error(error) for error in exc.errors()],
        },
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {
            "success": False,
            "error": HTTPStatus(exc.status_code).phrase,
            "message": exc.detail,
        }
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content), headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    settings = get_settings()
    message = str(exc) if settings.ENVIRONMENT == "development" else "Something went wrong"
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal Server Error", "message": message},
    )


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)
    init_db()

    service = build_text_repair_service(settings)
    app.state.text_repair = service
    app.state.response_interceptor = ResponseInterceptor(service)
    logger.info(f"{SERVICE_NAME} {__version__} started ({settings.ENVIRONMENT})")

    yield

    await service.aclose()
    logger.info(f"{SERVICE_NAME} stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Notification API", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    origins = settings.cors_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(notifications_router)
    app.include_router(text_router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok", "service": SERVICE_NAME, "version": __version__}

    return app


app = create_app()
