"""
Tests for the Rekognition adapter and FaceMatcher.

This test suite verifies:
- Strict base64 decoding of image payloads
- Verdict mapping for zero, one and several matches
- Error classification of service and transport failures
- Client construction from the settings struct

Rekognition is stubbed with botocore's Stubber; no network access is needed.

Run with: pytest tests/test_face_matcher.py -v
"""

import base64
import os
import sys

import boto3
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from botocore.stub import Stubber

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import AWSCredentials, RekognitionSettings
from core.face_matcher import FaceMatch, FaceMatcher, MatchResult, decode_image
from core.rekognition import (
    RecognitionError,
    RecognitionErrorKind,
    classify_error,
    create_rekognition_client,
)

COLLECTION_ID = "AauaStaffCollection"
IMAGE_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def face_match(staff_id, similarity, face_id="11111111-2222-3333-4444-555555555555"):
    return {
        "Similarity": similarity,
        "Face": {
            "FaceId": face_id,
            "ExternalImageId": staff_id,
            "Confidence": 99.9,
        },
    }


def expected_search_params():
    return {
        "CollectionId": COLLECTION_ID,
        "Image": {"Bytes": IMAGE_BYTES},
        "FaceMatchThreshold": 90.0,
        "MaxFaces": 1,
    }


@pytest.fixture
def rekognition_client():
    return boto3.client(
        "rekognition",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(rekognition_client):
    with Stubber(rekognition_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def matcher(rekognition_client):
    return FaceMatcher(rekognition_client, COLLECTION_ID, face_match_threshold=90.0, max_faces=1)


class TestDecodeImage:
    """Tests for decode_image."""

    def test_valid_base64(self):
        encoded = base64.b64encode(IMAGE_BYTES).decode()
        assert decode_image(encoded) == IMAGE_BYTES

    def test_not_base64_raises_invalid_image(self):
        with pytest.raises(RecognitionError) as exc_info:
            decode_image("not-base64-!!")
        assert exc_info.value.kind is RecognitionErrorKind.INVALID_IMAGE

    def test_bad_padding_raises_invalid_image(self):
        with pytest.raises(RecognitionError) as exc_info:
            decode_image("abc")
        assert exc_info.value.kind is RecognitionErrorKind.INVALID_IMAGE

    def test_empty_payload_raises_invalid_image(self):
        with pytest.raises(RecognitionError) as exc_info:
            decode_image("")
        assert exc_info.value.kind is RecognitionErrorKind.INVALID_IMAGE


class TestFaceMatcherSearch:
    """Tests for FaceMatcher.search against a stubbed client."""

    def test_match_returns_staff_id(self, matcher, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [face_match("S123", 99.2)]},
            expected_search_params(),
        )

        result = matcher.search(IMAGE_BYTES)

        assert result == MatchResult(is_authenticated=True, staff_id="S123", similarity=99.2)

    def test_no_match(self, matcher, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": []},
            expected_search_params(),
        )

        result = matcher.search(IMAGE_BYTES)

        assert result.is_authenticated is False
        assert result.staff_id is None

    def test_missing_face_matches_key_is_no_match(self, matcher, stubber):
        stubber.add_response("search_faces_by_image", {}, expected_search_params())

        assert matcher.search(IMAGE_BYTES).is_authenticated is False

    def test_only_first_match_counts(self, matcher, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [face_match("S123", 98.0), face_match("S999", 97.0)]},
            expected_search_params(),
        )

        result = matcher.search(IMAGE_BYTES)

        assert result.staff_id == "S123"

    def test_match_without_external_id(self, matcher, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [{"Similarity": 95.0, "Face": {"FaceId": "abc"}}]},
            expected_search_params(),
        )

        result = matcher.search(IMAGE_BYTES)

        assert result.is_authenticated is True
        assert result.staff_id is None

    @pytest.mark.parametrize(
        "code,kind",
        [
            ("InvalidParameterException", RecognitionErrorKind.INVALID_IMAGE),
            ("InvalidImageFormatException", RecognitionErrorKind.INVALID_IMAGE),
            ("ResourceNotFoundException", RecognitionErrorKind.COLLECTION_NOT_FOUND),
            ("ThrottlingException", RecognitionErrorKind.THROTTLED),
            ("InternalServerError", RecognitionErrorKind.SERVICE_FAILURE),
        ],
    )
    def test_service_errors_are_classified(self, matcher, stubber, code, kind):
        stubber.add_client_error("search_faces_by_image", service_error_code=code)

        with pytest.raises(RecognitionError) as exc_info:
            matcher.search(IMAGE_BYTES)

        assert exc_info.value.kind is kind
        assert exc_info.value.code == code


class TestFaceMatch:
    """Tests for FaceMatch parsing."""

    def test_from_response(self):
        match = FaceMatch.from_response(face_match("S42", 93.5, face_id="fid"))
        assert match.staff_id == "S42"
        assert match.face_id == "fid"
        assert match.similarity == 93.5


class TestClassifyError:
    """Tests for classify_error."""

    def test_transport_error_is_service_failure(self):
        error = classify_error(EndpointConnectionError(endpoint_url="https://rekognition"))
        assert error.kind is RecognitionErrorKind.SERVICE_FAILURE
        assert error.code is None

    def test_client_error_code(self):
        exc = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
            "SearchFacesByImage",
        )
        error = classify_error(exc)
        assert error.kind is RecognitionErrorKind.THROTTLED
        assert error.code == "ProvisionedThroughputExceededException"


class TestClientFactory:
    """Tests for create_rekognition_client and FaceMatcher.from_settings."""

    def test_client_uses_configured_region(self):
        settings = RekognitionSettings(
            region="eu-west-1",
            collection_id=COLLECTION_ID,
            credentials=AWSCredentials("key", "secret"),
        )
        client = create_rekognition_client(settings)
        assert client.meta.region_name == "eu-west-1"

    def test_from_settings(self):
        settings = RekognitionSettings(
            region="us-east-1",
            collection_id="OtherCollection",
            face_match_threshold=95.0,
            max_faces=1,
            credentials=AWSCredentials("key", "secret"),
        )
        matcher = FaceMatcher.from_settings(settings)
        assert matcher.collection_id == "OtherCollection"
        assert matcher.face_match_threshold == 95.0
        assert matcher.client.meta.region_name == "us-east-1"

    def test_credentials_explicit_flag(self):
        assert AWSCredentials("key", "secret").is_explicit is True
        assert AWSCredentials().is_explicit is False
        assert AWSCredentials("key", None).is_explicit is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
