"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .api.routes import error_response
from .services import QuotaService, QuotaExceededError
from .config import get_settings
from . import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    # Startup
    logger.info("Starting Label Verification API...")
    settings = get_settings()

    app.state.quota.reset()

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set. Label extraction will fail.")

    logger.info(f"API ready - Version {__version__}")
    logger.info(f"Request limit: {settings.max_total_requests} total verifications")

    yield

    # Shutdown
    logger.info("Shutting down Label Verification API...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
## AI-Powered Alcohol Label Verification API

Verifies that the text on an alcohol label image matches the values in the
label application.

### Features
- **AI Extraction**: Reads brand, class/type, alcohol content, net contents and
  the government warning from the label image
- **Field Verification**: Per-field pass/fail with a 0-100 confidence score
- **Batch Processing**: Up to 50 labels per request, 5 processed at a time

### Quick Start
1. Use `/api/health` to check API status
2. Use `/api/verify-label` to verify a label against expected values
3. Use `/api/verify-batch` to verify many labels at once
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Process-lifetime request quota
    app.state.quota = QuotaService(settings.max_total_requests)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in errors[:5]
        )
        return error_response(400, f"Invalid request: {detail}")

    @app.exception_handler(QuotaExceededError)
    async def quota_error_handler(request: Request, exc: QuotaExceededError):
        logger.warning(f"Request rejected: {exc}")
        return error_response(429, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {exc}")
        message = str(exc) if settings.debug else "Internal server error"
        return error_response(500, message)

    app.include_router(router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "GET /api/health",
                "verifyLabel": "POST /api/verify-label",
                "verifyBatch": "POST /api/verify-batch",
            },
        }

    return app


# Create app instance
app = create_app()
