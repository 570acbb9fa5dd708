# =============================================================================
# Flusec Cloud - Main Application
# =============================================================================
"""
Flusec Cloud Findings API

Receives security-scan findings from the Flusec editor extension,
identifies the submitter through their GitHub token, normalizes single-
and multi-workspace payloads into one document per workspace, and stores
them in Firestore.

Key Features:
- Authenticated: every batch is stored under the GitHub login of the token
- Backward compatible: flat single-workspace payloads are still accepted
- Batched: one request, one atomic write, many workspaces
- Observable: Structured logging for debugging and monitoring
"""

import logging

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router
from .config import get_settings
from .errors import IngestionError
from .models import ErrorResponse
from .services import get_findings_store, get_identity_resolver


# =============================================================================
# Logging Configuration
# =============================================================================

def configure_logging() -> None:
    """
    Configure structured logging with structlog.

    Sets up JSON-formatted logs suitable for Cloud Logging
    and local development.
    """
    settings = get_settings()

    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# =============================================================================
# Error Handling
# =============================================================================

async def ingestion_error_handler(request: Request, exc: IngestionError) -> JSONResponse:
    """Render ingestion failures as ``{"ok": false, "error": ...}``."""
    logger = structlog.get_logger(__name__)
    logger.info(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    # Configure logging first
    configure_logging()

    app = FastAPI(
        title="Flusec Cloud Findings API",
        description="""
## Overview

Collects security-scan findings submitted by the Flusec editor extension.

## Authentication

Send a GitHub access token as `Authorization: Bearer <token>`.
Batches are stored under the GitHub login that owns the token.

## Payloads

- **Multi-workspace**: `{extensionVersion, generatedAt, workspaces: [...]}`
- **Flat (legacy)**: `{workspaceId, workspaceName, findings, ...}`
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # The extension posts from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(IngestionError, ingestion_error_handler)

    # Include API routes
    app.include_router(router)

    # Log startup
    logger = structlog.get_logger(__name__)
    logger.info(
        "application_startup",
        service=settings.service_name,
        environment=settings.environment,
        project_id=settings.gcp_project_id,
        collection=settings.findings_collection,
    )

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# Startup & Shutdown Events
# =============================================================================

@app.on_event("startup")
async def startup_event() -> None:
    """
    Application startup handler.

    Creates the shared identity resolver and findings store; their
    network clients open on first use.
    """
    get_identity_resolver()
    get_findings_store()
    logger = structlog.get_logger(__name__)
    logger.info("startup_complete", message="Findings API ready to accept requests")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    """
    Application shutdown handler.

    Closes the GitHub HTTP client and drops the Firestore client reference.
    """
    logger = structlog.get_logger(__name__)
    logger.info("shutdown_initiated", message="Findings API shutting down")
    await get_identity_resolver().aclose()
    get_findings_store().release()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
