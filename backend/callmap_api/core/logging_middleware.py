"""Request logging middleware."""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("callmap.requests")

MAX_DETAIL_LENGTH = 300


def error_detail(body: bytes) -> str:
    """Pull the ``detail`` field out of an error body, falling back to raw text."""
    text = body.decode("utf-8", errors="replace")
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        detail = text
    else:
        detail = document.get("detail", text) if isinstance(document, dict) else text
        detail = detail if isinstance(detail, str) else json.dumps(detail)
    if len(detail) > MAX_DETAIL_LENGTH:
        detail = detail[:MAX_DETAIL_LENGTH] + "..."
    return detail


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each lookup with its status and latency.

    Failed lookups (unknown version, future version, conflicting chain) are
    logged at WARNING or ERROR together with the error detail the client saw.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - start) * 1000
        summary = (
            f"{request.method} {request.url.path} -> "
            f"{response.status_code} ({elapsed_ms:.0f}ms)"
        )

        if response.status_code < 400 or not hasattr(response, "body_iterator"):
            logger.info(summary)
            return response

        # The streamed body can only be read once; the client gets a copy
        chunks = [
            chunk.encode("utf-8") if isinstance(chunk, str) else chunk
            async for chunk in response.body_iterator
        ]
        body = b"".join(chunks)
        if response.status_code >= 500:
            logger.error(f"{summary}: {error_detail(body)}")
        else:
            logger.warning(f"{summary}: {error_detail(body)}")

        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
