# passvault/app/api/middleware.py
"""Transport middleware: trace ids, access log, gzip request bodies."""
import logging
import time
import zlib
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from passvault.app.core.log import TRACE_ID_HEADER, set_trace_id

logger = logging.getLogger("passvault.access")


class TraceIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Trace-Id or generate one; echo it on the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = set_trace_id(request.headers.get(TRACE_ID_HEADER))
        request.state.trace_id = trace_id
        response = await call_next(request)
        response.headers[TRACE_ID_HEADER] = trace_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d in %.1fms (%s bytes)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            response.headers.get("content-length", "-"),
        )
        return response


class GZipRequestMiddleware:
    """
    Inflate request bodies sent with `Content-Encoding: gzip`.

    The whole body is buffered, decompressed and replayed to the app with the
    encoding header removed. Inflation stops at `max_size` bytes: larger
    bodies are answered with 413, undecodable or truncated ones with 400.
    """

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024) -> None:
        self.app = app
        self.max_size = max_size

    def inflate(self, data: bytes) -> Optional[bytes]:
        """Return the inflated body, or None when it exceeds max_size."""
        decompressor = zlib.decompressobj(wbits=16 + zlib.MAX_WBITS)
        body = decompressor.decompress(data, self.max_size + 1)
        if len(body) > self.max_size:
            return None
        if not decompressor.eof:
            raise zlib.error("truncated gzip stream")
        return body

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        if headers.get(b"content-encoding", b"").lower() != b"gzip":
            await self.app(scope, receive, send)
            return

        chunks = []
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)

        try:
            body = self.inflate(b"".join(chunks))
        except zlib.error:
            logger.info("%s %s: invalid gzip body", scope.get("method"), scope.get("path"))
            response = PlainTextResponse("invalid gzip body", status_code=400)
            await response(scope, receive, send)
            return

        if body is None:
            logger.warning(
                "%s %s: gzip body inflates beyond %d bytes",
                scope.get("method"), scope.get("path"), self.max_size,
            )
            response = PlainTextResponse("request body too large", status_code=413)
            await response(scope, receive, send)
            return

        scope = dict(scope)
        scope["headers"] = [
            (name, value)
            for name, value in scope["headers"]
            if name not in (b"content-encoding", b"content-length")
        ] + [(b"content-length", str(len(body)).encode("latin-1"))]

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)
