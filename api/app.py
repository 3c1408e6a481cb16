"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application for the
Staff Face Check API.

The application provides:
- POST /authenticate: match a face image against the staff collection
- Health check endpoint

Usage:
    # From project root:
    uvicorn api.app:app --host 0.0.0.0 --port 5000 --reload

    # Or run directly (honours $PORT):
    python -m api.app
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import BodySizeLimitMiddleware, PayloadTooLargeError, payload_too_large_response
from api.routes.authentication import router as authentication_router
from api.routes.authentication import internal_error_response
from api.schemas import HealthResponse
from core.config import get_rekognition_settings, get_server_config
from core.face_matcher import FaceMatcher
from core.rekognition import RecognitionError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_TITLE = "Staff Face Check API"
API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup:
    - Build the Rekognition face matcher from configuration, unless one
      was handed to create_app()

    Runs on shutdown:
    - Log shutdown
    """
    logger.info("=" * 60)
    logger.info(f"Starting {API_TITLE}")
    logger.info("=" * 60)

    if app.state.face_matcher is None:
        logger.info("Initializing face matcher from configuration...")
        app.state.face_matcher = FaceMatcher.from_settings(get_rekognition_settings())

    matcher = app.state.face_matcher
    logger.info(
        f"Face matcher ready: collection={matcher.collection_id}, "
        f"threshold={matcher.face_match_threshold}, max_faces={matcher.max_faces}"
    )
    logger.info("API startup complete!")

    yield

    logger.info("Shutting down API...")


def create_app(
    face_matcher: Optional[FaceMatcher] = None,
    server_config: Optional[Dict[str, Any]] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        face_matcher: Matcher to serve requests with. If None, one is built
                      from configuration when the app starts.
        server_config: Server settings (max_body_bytes, cors_origins).
                       Defaults to get_server_config().

    Returns:
        Configured FastAPI application.
    """
    if server_config is None:
        server_config = get_server_config()
    max_body_bytes = server_config["max_body_bytes"]

    app = FastAPI(
        title=API_TITLE,
        description="""
Identity check for staff using AWS Rekognition face search.

## Authentication
POST a base64 JPEG to `/authenticate` as `{"image": "<base64>"}`.
The response is `{"isAuthenticated": true, "staffId": "..."}` on a match and
`{"isAuthenticated": false}` otherwise.
        """,
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.face_matcher = face_matcher

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=max_body_bytes)

    # Configure CORS for client access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.get("cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecognitionError)
    async def recognition_error_handler(request: Request, exc: RecognitionError):
        logger.error(f"{request.method} {request.url.path} failed [{exc.kind.value}]: {exc}")
        return internal_error_response()

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
        logger.warning(
            f"Rejected {request.method} {request.url.path}: "
            f"body exceeds {exc.max_body_bytes} bytes"
        )
        return payload_too_large_response()

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Malformed request bodies share the opaque failure of every other error
        logger.warning(f"{request.method} {request.url.path} invalid request body: {exc.errors()}")
        return internal_error_response()

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return internal_error_response()

    # Include routers
    app.include_router(authentication_router)

    # ============================================================
    # Health Check Endpoint
    # ============================================================

    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health_check(request: Request):
        """
        Check the health of the API.

        Reports whether the face matcher is configured and which collection
        it searches. No call is made to Rekognition.
        """
        matcher = request.app.state.face_matcher
        if matcher is None:
            return HealthResponse(status="degraded", matcher_ready=False)

        return HealthResponse(
            status="healthy",
            matcher_ready=True,
            collection_id=matcher.collection_id,
            face_match_threshold=matcher.face_match_threshold,
        )

    @app.get("/", tags=["system"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_server_config()

    logger.info(f"Starting server on {config['host']}:{config['port']}")
    uvicorn.run(
        "api.app:app",
        host=config["host"],
        port=config["port"],
        log_level="info",
    )
