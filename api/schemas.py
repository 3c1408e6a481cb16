"""
Pydantic Schemas for API Request/Response Models

This module defines the data models used for communication between the
capture client and the match endpoint. Field names on the wire are
camelCase (`isAuthenticated`, `staffId`) to match what the mobile client
already sends and reads.

These schemas provide:
- Type validation
- Automatic documentation in OpenAPI/Swagger
- Clear interface contracts
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


INTERNAL_ERROR_MESSAGE = "Internal Server Error"
PAYLOAD_TOO_LARGE_MESSAGE = "Payload Too Large"


# ============================================================
# Authentication Schemas
# ============================================================

class MatchRequest(BaseModel):
    """Request for staff authentication."""
    image: str = Field(..., description="Base64-encoded JPEG still from the front camera")


class MatchResponse(BaseModel):
    """Verdict for one authentication attempt."""
    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(
        ...,
        alias="isAuthenticated",
        description="True if the face matched an enrolled staff member",
    )
    staff_id: Optional[str] = Field(
        None,
        alias="staffId",
        description="External identifier of the matched face (omitted when no match)",
    )


class ErrorResponse(BaseModel):
    """Opaque error body returned for any failure."""
    error: str = Field(INTERNAL_ERROR_MESSAGE, description="Generic error message")


# ============================================================
# Health Check Schemas
# ============================================================

class HealthResponse(BaseModel):
    """Service health check response."""
    status: str = Field(..., description="Overall status: 'healthy' or 'degraded'")
    matcher_ready: bool = Field(..., description="Whether the Rekognition matcher is configured")
    collection_id: Optional[str] = Field(None, description="Face collection searched by /authenticate")
    face_match_threshold: Optional[float] = Field(None, description="Minimum similarity for a match")
