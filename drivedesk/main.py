"""
DriveDesk Relay — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds Settings and the three services once, stores them
       on app.state, and wires middleware, exception handlers and routes.
Who:   uvicorn imports `drivedesk.main:app`; tests call create_app() directly.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌───────────────┐ ┌──────────────────────┐ ┌─────┐ │
    │  │ /extract-info │ │ /send-booking-message│ │/hlth│ │
    │  └───────────────┘ └──────────────────────┘ └─────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ValidationError→400 │ LLM/File→500 │ Messaging→500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration; a missing GEMINI_KEY exits the process (status 1)
    3. Create the upload directory
    4. Log startup complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from drivedesk import __version__
from drivedesk.config import Settings, get_settings
from drivedesk.exceptions import (
    FileStorageError,
    LLMServiceError,
    MessagingProviderError,
    ValidationError,
)
from drivedesk.middleware.logging import RequestLoggingMiddleware
from drivedesk.middleware.request_id import RequestIDMiddleware, request_id_var
from drivedesk.routes import booking, extract, health
from drivedesk.services.file_service import FileService
from drivedesk.services.gemini_service import GeminiService
from drivedesk.services.whatsapp_service import WhatsAppService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # These log every connection and request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then a fail-fast configuration check.

    Raising SystemExit here makes uvicorn abort startup, so the relay never
    serves requests without a Gemini key.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("DriveDesk Relay starting up...")

    try:
        settings.validate_required()
    except ValueError as e:
        logger.critical("%s", str(e))
        raise SystemExit(1)

    upload_dir = app.state.file_service.upload_dir
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to the JSON bodies each endpoint promises.

    Handler table:
        ValidationError         → 400 {"error": message}
        RequestValidationError  → 400 {"error": ..., "details": [...]}
        FileStorageError        → 500 {"error": message}
        LLMServiceError         → 500 {"error": message}
        MessagingProviderError  → 500 {"message": ..., "error": provider body}
        Exception (fallback)    → 500 generic message, stack trace logged

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=400,
            content={"error": exc.message, "request_id": rid},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed bodies are client errors too; report them as 400, not 422."""
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request to %s: %s", rid, request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request.",
                "details": jsonable_encoder(exc.errors()),
                "request_id": rid,
            },
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "request_id": rid},
        )

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        rid = request_id_var.get("")
        logger.error("[%s] LLM service error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "request_id": rid},
        )

    @app.exception_handler(MessagingProviderError)
    async def handle_messaging_error(request: Request, exc: MessagingProviderError):
        """The provider's own error body is the useful part for the caller."""
        rid = request_id_var.get("")
        logger.error("[%s] Messaging provider error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "message": exc.message,
                "error": jsonable_encoder(exc.provider_error),
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        # Served by ServerErrorMiddleware, outside RequestIDMiddleware
        return JSONResponse(
            status_code=500,
            content={
                "error": "An unexpected error occurred.",
                "request_id": rid,
            },
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use. Defaults to get_settings(), which
                  reads the environment. Tests pass their own.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="DriveDesk Relay",
        description=(
            "Relay for the DriveDesk frontend: reads driving licence fields from "
            "an uploaded image with Google Gemini and sends test-drive booking "
            "confirmations through the WhatsApp Cloud API."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.file_service = FileService(settings.upload_dir)
    app.state.llm_service = GeminiService(settings)
    app.state.whatsapp_service = WhatsAppService(settings)

    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(extract.router)
    app.include_router(booking.router)
    app.include_router(health.router)

    return app


app = create_app()
