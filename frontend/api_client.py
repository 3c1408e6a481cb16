"""
API client for the Staff Face Check service.

Posts a base64 image to POST /authenticate and returns a typed outcome
instead of raising: callers get Authenticated, NotAuthenticated or
RequestFailed and handle each one explicitly.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import httpx

logger = logging.getLogger(__name__)

# Replace with the deployed match endpoint (or set client.endpoint_url in config.yaml)
DEFAULT_ENDPOINT_URL = "https://your-backend.com/authenticate"


@dataclass(frozen=True)
class Authenticated:
    """The face matched an enrolled staff member."""
    staff_id: Optional[str] = None


@dataclass(frozen=True)
class NotAuthenticated:
    """The server answered, but no enrolled face matched."""


@dataclass(frozen=True)
class RequestFailed:
    """The request did not produce a verdict (transport error, non-2xx, bad body)."""
    reason: str
    status_code: Optional[int] = None


MatchOutcome = Union[Authenticated, NotAuthenticated, RequestFailed]


class MatchClient:
    """
    Client for the match endpoint.

    The endpoint URL is fixed when the client is built.
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        timeout_sec: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint_url = endpoint_url
        self.timeout_sec = timeout_sec
        self._transport = transport

    def authenticate(self, image_b64: str) -> MatchOutcome:
        """
        Submit one base64 image for authentication.

        Args:
            image_b64: Base64-encoded JPEG still.

        Returns:
            Authenticated, NotAuthenticated or RequestFailed.
        """
        try:
            with httpx.Client(timeout=self.timeout_sec, transport=self._transport) as client:
                response = client.post(self.endpoint_url, json={"image": image_b64})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"POST {self.endpoint_url} error: {e}")
            return RequestFailed(reason=f"{type(e).__name__}: {e}")

        if not response.is_success:
            logger.error(f"POST {self.endpoint_url} failed: {response.status_code}")
            return RequestFailed(
                reason=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            logger.error(f"POST {self.endpoint_url} returned a non-JSON body")
            return RequestFailed(reason="Invalid JSON response", status_code=response.status_code)

        if not isinstance(data, dict):
            return RequestFailed(reason="Unexpected response shape", status_code=response.status_code)

        if data.get("isAuthenticated") is True:
            return Authenticated(staff_id=data.get("staffId"))
        return NotAuthenticated()
