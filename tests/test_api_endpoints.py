"""
Tests for API Endpoints

This test suite verifies:
- POST /authenticate verdicts (match, no match, first match wins)
- Error collapsing into the opaque 500 body
- Request body size limit
- Health check and root endpoints
- Response schemas

Rekognition is stubbed with botocore's Stubber on a real boto3 client, and
the matcher is handed to create_app() directly.

Run with: pytest tests/test_api_endpoints.py -v
"""

import base64
import os
import sys

import boto3
import pytest
from botocore.stub import ANY, Stubber
from unittest.mock import MagicMock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from api.app import create_app
from core.face_matcher import FaceMatcher

COLLECTION_ID = "AauaStaffCollection"
ENROLLED_FACE = base64.b64encode(b"\xff\xd8\xff\xe0enrolled-face").decode()
UNENROLLED_FACE = base64.b64encode(b"\xff\xd8\xff\xe0unenrolled-face").decode()
SERVER_CONFIG = {
    "host": "127.0.0.1",
    "port": 5000,
    "max_body_bytes": 10 * 1024 * 1024,
    "cors_origins": ["*"],
}


def search_params(image_b64):
    return {
        "CollectionId": COLLECTION_ID,
        "Image": {"Bytes": base64.b64decode(image_b64)},
        "FaceMatchThreshold": 90.0,
        "MaxFaces": 1,
    }


def face_match(staff_id, similarity=99.0):
    return {
        "Similarity": similarity,
        "Face": {"FaceId": f"face-{staff_id}", "ExternalImageId": staff_id, "Confidence": 99.9},
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
def client(rekognition_client, stubber):
    """Create test client around a stubbed matcher."""
    matcher = FaceMatcher(rekognition_client, COLLECTION_ID, face_match_threshold=90.0, max_faces=1)
    app = create_app(face_matcher=matcher, server_config=SERVER_CONFIG)
    yield TestClient(app)


class TestAuthenticateEndpoint:
    """Tests for POST /authenticate."""

    def test_enrolled_face_is_authenticated(self, client, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [face_match("S123")]},
            search_params(ENROLLED_FACE),
        )

        response = client.post("/authenticate", json={"image": ENROLLED_FACE})

        assert response.status_code == 200
        assert response.json() == {"isAuthenticated": True, "staffId": "S123"}

    def test_unenrolled_face_is_not_authenticated(self, client, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": []},
            search_params(UNENROLLED_FACE),
        )

        response = client.post("/authenticate", json={"image": UNENROLLED_FACE})

        assert response.status_code == 200
        assert response.json() == {"isAuthenticated": False}

    def test_first_match_wins(self, client, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [face_match("S123", 99.5), face_match("S456", 98.0)]},
            search_params(ENROLLED_FACE),
        )

        response = client.post("/authenticate", json={"image": ENROLLED_FACE})

        assert response.json()["staffId"] == "S123"

    def test_match_without_staff_id_omits_field(self, client, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": [{"Similarity": 97.0, "Face": {"FaceId": "abc"}}]},
            search_params(ENROLLED_FACE),
        )

        response = client.post("/authenticate", json={"image": ENROLLED_FACE})

        assert response.status_code == 200
        assert response.json() == {"isAuthenticated": True}

    def test_malformed_base64_returns_500(self, client):
        # No stubbed response: the service must not be called.
        response = client.post("/authenticate", json={"image": "not-base64-!!"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    @pytest.mark.parametrize(
        "code",
        [
            "InvalidImageFormatException",
            "ResourceNotFoundException",
            "ThrottlingException",
            "InternalServerError",
        ],
    )
    def test_service_errors_return_opaque_500(self, client, stubber, code):
        stubber.add_client_error(
            "search_faces_by_image",
            service_error_code=code,
            expected_params={
                "CollectionId": COLLECTION_ID,
                "Image": ANY,
                "FaceMatchThreshold": 90.0,
                "MaxFaces": 1,
            },
        )

        response = client.post("/authenticate", json={"image": ENROLLED_FACE})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"image": 123},
            {"image": None},
            {"picture": ENROLLED_FACE},
        ],
    )
    def test_invalid_request_body_returns_500(self, client, body):
        response = client.post("/authenticate", json=body)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    def test_non_json_body_returns_500(self, client):
        response = client.post(
            "/authenticate",
            content=b"image=abc",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}

    def test_oversized_body_is_rejected(self, rekognition_client, stubber):
        matcher = FaceMatcher(rekognition_client, COLLECTION_ID)
        small_limit = dict(SERVER_CONFIG, max_body_bytes=1024)
        client = TestClient(create_app(face_matcher=matcher, server_config=small_limit))

        response = client.post("/authenticate", json={"image": "A" * 4096})

        assert response.status_code == 413
        assert response.json() == {"error": "Payload Too Large"}

    def test_oversized_chunked_body_is_rejected(self, rekognition_client, stubber):
        matcher = FaceMatcher(rekognition_client, COLLECTION_ID)
        small_limit = dict(SERVER_CONFIG, max_body_bytes=1024)
        client = TestClient(create_app(face_matcher=matcher, server_config=small_limit))

        def chunks():
            yield b'{"image": "'
            for _ in range(4):
                yield b"A" * 1000
            yield b'"}'

        response = client.post(
            "/authenticate",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 413
        assert response.json() == {"error": "Payload Too Large"}

    def test_chunked_body_under_limit_is_served(self, rekognition_client, stubber):
        matcher = FaceMatcher(rekognition_client, COLLECTION_ID)
        client = TestClient(create_app(face_matcher=matcher, server_config=SERVER_CONFIG))
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": []},
            search_params(UNENROLLED_FACE),
        )

        def chunks():
            yield b'{"image": "'
            yield UNENROLLED_FACE.encode()
            yield b'"}'

        response = client.post(
            "/authenticate",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"isAuthenticated": False}

    def test_cors_is_open(self, client, stubber):
        stubber.add_response(
            "search_faces_by_image",
            {"FaceMatches": []},
            search_params(UNENROLLED_FACE),
        )

        response = client.post(
            "/authenticate",
            json={"image": UNENROLLED_FACE},
            headers={"Origin": "https://staff.example.com"},
        )

        assert response.headers.get("access-control-allow-origin") in ("*", "https://staff.example.com")

    def test_missing_matcher_returns_500(self):
        app = create_app(face_matcher=None, server_config=SERVER_CONFIG)
        client = TestClient(app)  # lifespan not run: no matcher is built

        response = client.post("/authenticate", json={"image": ENROLLED_FACE})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_status(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["matcher_ready"] is True
        assert data["collection_id"] == COLLECTION_ID
        assert data["face_match_threshold"] == 90.0

    def test_health_without_matcher_is_degraded(self):
        client = TestClient(create_app(face_matcher=None, server_config=SERVER_CONFIG))

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["matcher_ready"] is False

    def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "name" in data
        assert "version" in data
        assert "docs" in data


class TestLifespan:
    """Tests for matcher construction at startup."""

    def test_supplied_matcher_is_kept(self):
        matcher = MagicMock(spec=FaceMatcher)
        matcher.collection_id = COLLECTION_ID
        matcher.face_match_threshold = 90.0
        matcher.max_faces = 1
        app = create_app(face_matcher=matcher, server_config=SERVER_CONFIG)

        with TestClient(app):
            assert app.state.face_matcher is matcher


class TestSchemas:
    """Tests for Pydantic schemas."""

    def test_match_response_serializes_camel_case(self):
        from api.schemas import MatchResponse

        response = MatchResponse(is_authenticated=True, staff_id="S1")

        data = response.model_dump(by_alias=True)
        assert data == {"isAuthenticated": True, "staffId": "S1"}

    def test_match_response_accepts_aliases(self):
        from api.schemas import MatchResponse

        response = MatchResponse.model_validate({"isAuthenticated": False})

        assert response.is_authenticated is False
        assert response.model_dump(by_alias=True, exclude_none=True) == {"isAuthenticated": False}

    def test_error_response_default(self):
        from api.schemas import ErrorResponse

        assert ErrorResponse().model_dump() == {"error": "Internal Server Error"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
