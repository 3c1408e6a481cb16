"""
Authentication API Routes

This module provides the POST /authenticate endpoint. It decodes the base64
image, searches the staff collection in AWS Rekognition and relays the
verdict. A missing match is a normal 200 response; every failure (bad
payload, bad image, missing collection, throttling, outage) is logged with
its class and collapsed into one opaque 500.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from api.schemas import (
    ErrorResponse,
    MatchRequest,
    MatchResponse,
)
from core.face_matcher import FaceMatcher, decode_image
from core.rekognition import RecognitionError, RecognitionErrorKind

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["authentication"])


def internal_error_response() -> JSONResponse:
    """The single error body every failure maps to."""
    return JSONResponse(status_code=500, content=ErrorResponse().model_dump())


def get_face_matcher(request: Request) -> FaceMatcher:
    """
    Dependency returning the matcher stored on the application.

    Raises:
        RecognitionError: If the application started without a matcher.
    """
    matcher = getattr(request.app.state, "face_matcher", None)
    if matcher is None:
        raise RecognitionError(
            "Face matcher is not initialized",
            kind=RecognitionErrorKind.SERVICE_FAILURE,
        )
    return matcher


@router.post(
    "/authenticate",
    response_model=MatchResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
async def authenticate(
    request: MatchRequest,
    matcher: FaceMatcher = Depends(get_face_matcher),
):
    """
    Authenticate a staff member from one captured face image.

    This endpoint:
    1. Decodes the base64 image
    2. Searches the staff collection (threshold 90, one match at most)
    3. Returns the verdict and the matched staff ID

    Args:
        request: MatchRequest with the base64 image.

    Returns:
        MatchResponse, or a 500 ErrorResponse if anything failed.
    """
    try:
        image_bytes = decode_image(request.image)
        result = await run_in_threadpool(matcher.search, image_bytes)
    except RecognitionError as e:
        logger.error(f"Authentication failed [{e.kind.value}] code={e.code}: {e}")
        return internal_error_response()

    if result.is_authenticated:
        logger.info(
            f"Authenticated staff_id={result.staff_id} "
            f"(similarity={result.similarity:.1f})"
        )
    else:
        logger.info("No matching face in collection")

    return MatchResponse(
        is_authenticated=result.is_authenticated,
        staff_id=result.staff_id,
    )
