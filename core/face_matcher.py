"""
Face Matcher Module

Wraps the Rekognition "search faces by image" call against one fixed
collection. The collection is only ever read here.

Usage:
    from core.face_matcher import FaceMatcher, decode_image

    matcher = FaceMatcher.from_settings(get_rekognition_settings())
    result = matcher.search(decode_image(image_b64))
    if result.is_authenticated:
        print(result.staff_id)
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from core.config import RekognitionSettings
from core.rekognition import (
    RecognitionError,
    RecognitionErrorKind,
    classify_error,
    create_rekognition_client,
)

# Setup logging
logger = logging.getLogger(__name__)


@dataclass
class FaceMatch:
    """One entry of the service's match list."""
    face_id: Optional[str]
    staff_id: Optional[str]  # ExternalImageId assigned at enrollment
    similarity: float

    @classmethod
    def from_response(cls, entry: Dict[str, Any]) -> "FaceMatch":
        face = entry.get("Face", {})
        return cls(
            face_id=face.get("FaceId"),
            staff_id=face.get("ExternalImageId"),
            similarity=float(entry.get("Similarity", 0.0)),
        )


@dataclass
class MatchResult:
    """Verdict for one submitted image."""
    is_authenticated: bool
    staff_id: Optional[str] = None
    similarity: Optional[float] = None


def decode_image(image_b64: str) -> bytes:
    """
    Decode a base64 image payload.

    Args:
        image_b64: Base64 string (standard alphabet, padded).

    Returns:
        The raw image bytes.

    Raises:
        RecognitionError: With kind INVALID_IMAGE if the string is not valid
            base64 or decodes to nothing.
    """
    try:
        image_bytes = base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RecognitionError(
            f"Image payload is not valid base64: {e}",
            kind=RecognitionErrorKind.INVALID_IMAGE,
        ) from e

    if not image_bytes:
        raise RecognitionError(
            "Image payload is empty",
            kind=RecognitionErrorKind.INVALID_IMAGE,
        )

    return image_bytes


class FaceMatcher:
    """
    Searches the staff collection for the face in an image.

    The Rekognition client is passed in, so callers decide how it is built
    (see from_settings) and tests can hand in a stubbed client.
    """

    def __init__(
        self,
        client: Any,
        collection_id: str,
        face_match_threshold: float = 90.0,
        max_faces: int = 1,
    ):
        self.client = client
        self.collection_id = collection_id
        self.face_match_threshold = face_match_threshold
        self.max_faces = max_faces

    @classmethod
    def from_settings(cls, settings: RekognitionSettings) -> "FaceMatcher":
        """Build a matcher (and its Rekognition client) from settings."""
        return cls(
            client=create_rekognition_client(settings),
            collection_id=settings.collection_id,
            face_match_threshold=settings.face_match_threshold,
            max_faces=settings.max_faces,
        )

    def search(self, image_bytes: bytes) -> MatchResult:
        """
        Search the collection for the face in image_bytes.

        Only the top match counts; anything after it is ignored.

        Args:
            image_bytes: Raw JPEG/PNG bytes.

        Returns:
            MatchResult with is_authenticated and the matched staff_id.

        Raises:
            RecognitionError: If the service call fails for any reason.
        """
        logger.debug(
            f"Searching collection {self.collection_id}: {len(image_bytes)} bytes, "
            f"threshold={self.face_match_threshold}, max_faces={self.max_faces}"
        )
        try:
            response = self.client.search_faces_by_image(
                CollectionId=self.collection_id,
                Image={"Bytes": image_bytes},
                FaceMatchThreshold=self.face_match_threshold,
                MaxFaces=self.max_faces,
            )
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e) from e

        matches: List[FaceMatch] = [
            FaceMatch.from_response(entry) for entry in response.get("FaceMatches") or []
        ]
        if not matches:
            return MatchResult(is_authenticated=False)

        top = matches[0]
        return MatchResult(
            is_authenticated=True,
            staff_id=top.staff_id,
            similarity=top.similarity,
        )
