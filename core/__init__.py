"""
Core Module for the Staff Face Check service

This package holds everything that talks to AWS Rekognition, plus the
configuration loader shared by the API, the bootstrap script and the
capture client.

Main components:
    - config: Configuration loading (config.yaml + environment)
    - rekognition: boto3 client factory and error classification
    - collection: Idempotent collection bootstrap
    - face_matcher: Search-by-image against the staff collection

Usage:
    from core.config import get_rekognition_settings
    from core.face_matcher import FaceMatcher
"""

from core.config import (
    AWSCredentials,
    RekognitionSettings,
    get_config,
    get_section,
    get_rekognition_settings,
    get_api_config,
    get_server_config,
    get_client_config,
    get_camera_config,
    get_frontend_config,
)

from core.rekognition import (
    RecognitionError,
    RecognitionErrorKind,
    classify_error,
    create_rekognition_client,
)

from core.collection import CollectionStatus, ensure_collection

from core.face_matcher import (
    FaceMatch,
    FaceMatcher,
    MatchResult,
    decode_image,
)

__all__ = [
    # Configuration
    "AWSCredentials",
    "RekognitionSettings",
    "get_config",
    "get_section",
    "get_rekognition_settings",
    "get_api_config",
    "get_server_config",
    "get_client_config",
    "get_camera_config",
    "get_frontend_config",
    # Rekognition
    "RecognitionError",
    "RecognitionErrorKind",
    "classify_error",
    "create_rekognition_client",
    # Collection bootstrap
    "CollectionStatus",
    "ensure_collection",
    # Matching
    "FaceMatch",
    "FaceMatcher",
    "MatchResult",
    "decode_image",
]
