"""
HTTP middleware for Shortener Platform.

- `GzipRequestMiddleware`: transparently gunzips request bodies sent with
  `Content-Encoding: gzip` (response compression is Starlette's
  `GZipMiddleware`, wired in `main.create_app`).
- `log_requests`: one DEBUG line per request with method, path, status,
  duration and response size.
"""

import logging
import time
import zlib

from fastapi import Request
from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

log = logging.getLogger("shortener.http")

GZIP_CONTENT_TYPES = ("application/json", "text/html", "text/plain", "application/x-gzip")

# Upper bound on a request body, before and after inflating.
MAX_BODY_SIZE = 10 * 1024 * 1024


class BodyTooLarge(Exception):
    pass


def _accepts_gzip_body(headers: Headers) -> bool:
    if "gzip" not in headers.get("content-encoding", "").lower():
        return False
    content_type = headers.get("content-type", "").lower()
    return any(ct in content_type for ct in GZIP_CONTENT_TYPES)


def _gunzip(data: bytes, limit: int) -> bytes:
    """Inflate a gzip member without ever producing more than `limit` bytes."""
    if not data:
        return b""
    inflater = zlib.decompressobj(16 + zlib.MAX_WBITS)
    body = inflater.decompress(data, limit + 1)
    if len(body) > limit:
        raise BodyTooLarge(f"inflated body exceeds {limit} bytes")
    if not inflater.eof:
        raise zlib.error("truncated gzip body")
    return body


class GzipRequestMiddleware:
    """Pure ASGI middleware replacing a gzip request body with its plain bytes.

    Bodies larger than `max_body_size`, compressed or inflated, get a 413.
    """

    def __init__(self, app: ASGIApp, max_body_size: int = MAX_BODY_SIZE) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not _accepts_gzip_body(Headers(scope=scope)):
            await self.app(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_body_size:
                await PlainTextResponse("request body too large", status_code=413)(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        try:
            body = _gunzip(b"".join(chunks), self.max_body_size)
        except BodyTooLarge:
            await PlainTextResponse("request body too large", status_code=413)(scope, receive, send)
            return
        except zlib.error:
            await PlainTextResponse("invalid gzip body", status_code=400)(scope, receive, send)
            return

        headers = [(k, v) for k, v in scope["headers"] if k not in (b"content-encoding", b"content-length")]
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
        scope = dict(scope, headers=headers)

        delivered = False

        async def receive_plain() -> Message:
            nonlocal delivered
            if not delivered:
                delivered = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, receive_plain, send)


async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    log.debug(
        "got incoming HTTP request method=%s path=%s duration=%.3fms status=%s content_length=%s",
        request.method,
        request.url.path,
        (time.perf_counter() - started) * 1000.0,
        response.status_code,
        response.headers.get("content-length", "-"),
    )
    return response
