"""
Request body size limit for the API.

The limit is applied twice: up front from the Content-Length header, and
on the bytes actually received, so chunked uploads without a length are
capped as well.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.schemas import ErrorResponse, PAYLOAD_TOO_LARGE_MESSAGE

logger = logging.getLogger(__name__)


class PayloadTooLargeError(HTTPException):
    """Raised while reading a request body that exceeds the limit."""

    def __init__(self, max_body_bytes: int):
        super().__init__(status_code=413, detail=PAYLOAD_TOO_LARGE_MESSAGE)
        self.max_body_bytes = max_body_bytes


def payload_too_large_response() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content=ErrorResponse(error=PAYLOAD_TOO_LARGE_MESSAGE).model_dump(),
    )


def _content_length(scope: Scope) -> Optional[int]:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            text = value.decode("latin-1")
            return int(text) if text.isdigit() else None
    return None


class BodySizeLimitMiddleware:
    """
    ASGI middleware rejecting request bodies over max_body_bytes with 413.

    Args:
        app: The wrapped ASGI application.
        max_body_bytes: Largest accepted body, in bytes.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = _content_length(scope)
        if content_length is not None and content_length > self.max_body_bytes:
            self._log_rejected(scope, f"declared body of {content_length} bytes")
            await payload_too_large_response()(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise PayloadTooLargeError(self.max_body_bytes)
            return message

        async def tracked_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracked_send)
        except PayloadTooLargeError:
            if response_started:
                raise
            self._log_rejected(scope, f"streamed body over {received} bytes")
            await payload_too_large_response()(scope, receive, send)

    def _log_rejected(self, scope: Scope, detail: str) -> None:
        logger.warning(
            f"Rejected {scope.get('method')} {scope.get('path')}: "
            f"{detail} exceeds {self.max_body_bytes}"
        )
