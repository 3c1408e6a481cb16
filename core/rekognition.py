"""
AWS Rekognition Client Module

Builds the boto3 Rekognition client from an explicit RekognitionSettings
struct and translates botocore failures into a single RecognitionError type
with a coarse classification (bad image, missing collection, throttling,
anything else).

Usage:
    from core.config import get_rekognition_settings
    from core.rekognition import create_rekognition_client

    client = create_rekognition_client(get_rekognition_settings())
"""

import logging
from enum import Enum
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import RekognitionSettings

# Setup logging
logger = logging.getLogger(__name__)


class RecognitionErrorKind(Enum):
    """Coarse failure classes of a recognition call."""
    INVALID_IMAGE = "invalid_image"
    COLLECTION_NOT_FOUND = "collection_not_found"
    THROTTLED = "throttled"
    SERVICE_FAILURE = "service_failure"


_KIND_BY_CODE = {
    "InvalidParameterException": RecognitionErrorKind.INVALID_IMAGE,
    "InvalidImageFormatException": RecognitionErrorKind.INVALID_IMAGE,
    "ImageTooLargeException": RecognitionErrorKind.INVALID_IMAGE,
    "ResourceNotFoundException": RecognitionErrorKind.COLLECTION_NOT_FOUND,
    "ThrottlingException": RecognitionErrorKind.THROTTLED,
    "ProvisionedThroughputExceededException": RecognitionErrorKind.THROTTLED,
    "LimitExceededException": RecognitionErrorKind.THROTTLED,
}


class RecognitionError(Exception):
    """A recognition call (or its input) failed."""

    def __init__(
        self,
        message: str,
        kind: RecognitionErrorKind = RecognitionErrorKind.SERVICE_FAILURE,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.code = code


def error_code(exc: Exception) -> Optional[str]:
    """Return the AWS error code of a ClientError, or None."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def classify_error(exc: Exception) -> RecognitionError:
    """
    Wrap a botocore exception into a RecognitionError.

    Args:
        exc: A ClientError (service answered with an error) or a
             BotoCoreError (transport / client-side failure).

    Returns:
        RecognitionError carrying the classified kind and the AWS code.
    """
    code = error_code(exc)
    kind = _KIND_BY_CODE.get(code, RecognitionErrorKind.SERVICE_FAILURE)
    return RecognitionError(str(exc), kind=kind, code=code)


def create_rekognition_client(settings: RekognitionSettings) -> Any:
    """
    Create a Rekognition client for the configured region.

    Explicit credentials from the settings struct are passed straight to
    boto3; otherwise boto3 resolves them from its default chain
    (environment, shared config, instance role).
    """
    kwargs = {"region_name": settings.region}
    creds = settings.credentials
    if creds.is_explicit:
        kwargs["aws_access_key_id"] = creds.access_key_id
        kwargs["aws_secret_access_key"] = creds.secret_access_key
        if creds.session_token:
            kwargs["aws_session_token"] = creds.session_token

    logger.info(
        f"Creating Rekognition client: region={settings.region}, "
        f"explicit_credentials={creds.is_explicit}"
    )
    return boto3.client("rekognition", **kwargs)
