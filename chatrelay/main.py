import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatrelay.api import api_router
from chatrelay.config import Settings, settings as default_settings
from chatrelay.services.relay import ChatRelay
from chatrelay.utils.errors import RelayError
from chatrelay.utils.llm import ChatProvider, OpenAIChatProvider
from chatrelay.utils.request_id import (
    BodySizeLimitMiddleware,
    error_response,
    get_request_id,
    request_id_middleware,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Suppress unnecessary logs
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first_error = errors[0]
    if first_error.get("type") == "missing":
        field = first_error.get("loc", ["body"])[-1]
        return f"Missing required field: {field}"
    return first_error.get("msg") or "Invalid request"


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[ChatProvider] = None,
) -> FastAPI:
    """Build the relay app. Tests pass their own settings and provider."""
    settings = settings or default_settings
    provider = provider or OpenAIChatProvider(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"Starting chat relay, model={settings.openai_model}")
        logger.info(f"CORS origin: {settings.cors_origin or 'disabled'}")
        yield
        logger.info("Shutting down chat relay")

    app = FastAPI(title="Chat Relay API", lifespan=lifespan)
    app.state.settings = settings
    app.state.relay = ChatRelay(provider=provider, settings=settings)

    # Add middleware; the last one added runs first
    cors_origin = (settings.cors_origin or "").strip()
    if cors_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[cors_origin],
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["x-request-id"],
        )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.middleware("http")(request_id_middleware)

    app.include_router(api_router)

    @app.exception_handler(RelayError)
    async def relay_exception_handler(request: Request, exc: RelayError):
        request_id = get_request_id(request)
        if exc.status_code >= 500:
            logger.error(f"[{request_id}] Server error: {exc.message}")
        return error_response(request_id, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Validation errors are 400, not FastAPI's default 422"""
        request_id = get_request_id(request)
        message = _validation_message(exc)
        logger.warning(f"[{request_id}] Validation error: {message}")
        return error_response(request_id, 400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unmatched path or method
        if exc.status_code in (404, 405):
            message = f"Not found: {request.method} {request.url.path}"
            return error_response(get_request_id(request), 404, message)
        return error_response(get_request_id(request), exc.status_code, str(exc.detail))

    return app


app = create_app()
