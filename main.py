"""
Main API module for Shortener Platform.

Responsibilities:
    - Expose REST endpoints for shortening URLs (single, JSON, batch)
    - Redirect short codes back to their original URLs
    - List the URLs saved by the current user
    - Report storage liveness (/ping)

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - One `Settings` object and one storage backend per app; the backend is
      picked by the storage factory (postgres > file > memory).
    - URLManager holds the shortening rules; routes only shape HTTP.
    - Storage errors are mapped to statuses here and nowhere else:
      duplicate -> 409, bad input / undecodable code -> 400,
      unavailable or other storage failure -> 500.
"""

import contextlib
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from auth.dependencies import get_current_user, user_token_middleware
from shortener_platform.config import Settings
from shortener_platform.manager.url_manager import URLManager
from shortener_platform.middleware import GzipRequestMiddleware, log_requests
from shortener_platform.storage.base import BaseStorage
from shortener_platform.storage.exceptions import (
    DecodeError,
    DuplicateError,
    NotFoundError,
    StorageError,
    UnavailableError,
)
from shortener_platform.storage.storage_factory import get_storage

log = logging.getLogger("shortener")


class ShortenRequest(BaseModel):
    """Request payload for POST /api/shorten."""
    url: str


class BatchItem(BaseModel):
    """One row of a POST /api/shorten/batch payload."""
    correlation_id: str
    original_url: str


def create_app(settings: Optional[Settings] = None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings (Settings, optional): Runtime configuration; read from the
            environment when omitted.
        storage (BaseStorage, optional): Pre-built backend (tests inject one);
            chosen by the storage factory when omitted.

    Returns:
        FastAPI: A configured application. The backend is bootstrapped on
        startup and closed on shutdown (lifespan).
    """
    settings = settings or Settings.from_env()
    storage = storage or get_storage(settings)
    manager = URLManager(storage=storage, base_url=settings.base_url)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        storage.bootstrap()
        log.info("storage backend: %s", settings.storage_backend)
        try:
            yield
        finally:
            storage.close()

    app = FastAPI(
        title="Shortener Platform",
        description="Base64 URL shortener with memory, file and PostgreSQL storage",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.manager = manager

    # Outermost first: gunzip request bodies, then identity, logging, compression.
    app.add_middleware(GZipMiddleware, minimum_size=1)
    app.middleware("http")(log_requests)
    app.middleware("http")(user_token_middleware)
    app.add_middleware(GzipRequestMiddleware)

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def bad_payload(request: Request, exc: RequestValidationError):
        return JSONResponse({"detail": "Bad Request"}, status_code=400)

    @app.exception_handler(DecodeError)
    async def decode_failed(request: Request, exc: DecodeError):
        return PlainTextResponse(f"Error: {exc}", status_code=400)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(UnavailableError)
    async def unavailable(request: Request, exc: UnavailableError):
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(StorageError)
    async def storage_failed(request: Request, exc: StorageError):
        log.error("storage failure: %s", exc)
        return PlainTextResponse("internal storage error", status_code=500)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/ping")
    def ping() -> Response:
        """Return "pong" when the storage backend answers within the timeout."""
        manager.ping(timeout=settings.db_timeout)
        return PlainTextResponse("pong")

    @app.post("/")
    async def encode(request: Request, user_id: str = Depends(get_current_user)) -> Response:
        """
        Shorten a URL sent as the raw text body.

        Returns:
            201 with the short link as text, 409 with the same link when the
            URL was already shortened, 400 on an invalid URL.
        """
        body = (await request.body()).decode("utf-8", errors="replace")
        try:
            link = await run_in_threadpool(manager.shorten, body, user_id=user_id)
        except ValueError:
            return PlainTextResponse("Invalid URL", status_code=400)
        except DuplicateError as exc:
            return PlainTextResponse(exc.short_link or "", status_code=409)
        return PlainTextResponse(link, status_code=201)

    @app.post("/api/shorten")
    def shorten(req: ShortenRequest, user_id: str = Depends(get_current_user)) -> Response:
        """
        Shorten a URL sent as `{"url": ...}`.

        Returns:
            201 `{"result": link}`; 409 with the same body on a duplicate;
            400 on an invalid URL.
        """
        try:
            link = manager.shorten(req.url, user_id=user_id)
        except ValueError:
            return JSONResponse({"detail": "Invalid URL"}, status_code=400)
        except DuplicateError as exc:
            return JSONResponse({"result": exc.short_link}, status_code=409)
        return JSONResponse({"result": link}, status_code=201)

    @app.post("/api/shorten/batch")
    def shorten_batch(items: List[BatchItem], user_id: str = Depends(get_current_user)) -> Response:
        """
        Shorten many URLs at once.

        Request:  [{"correlation_id": "1", "original_url": "https://..."}, ...]
        Response: [{"correlation_id": "1", "short_url": "http://host/<code>"}, ...]

        The whole batch is rejected with 400 if any URL is invalid, and with
        409 if the backend reports a duplicate.
        """
        try:
            rows = manager.shorten_batch([item.model_dump() for item in items], user_id=user_id)
        except ValueError:
            return JSONResponse({"detail": "Invalid URL"}, status_code=400)
        except DuplicateError as exc:
            return JSONResponse({"detail": str(exc)}, status_code=409)
        return JSONResponse([row.to_dict() for row in rows], status_code=201)

    @app.get("/api/user/urls")
    def user_urls(user_id: str = Depends(get_current_user)) -> Response:
        """
        List the URLs shortened by the current user.

        Returns:
            200 `[{"short_url": ..., "original_url": ...}]`, or 204 when the
            user has none.
        """
        rows = manager.user_urls(user_id)
        if not rows:
            return Response(status_code=204)
        body: List[Dict[str, Any]] = [row.to_dict() for row in rows]
        return JSONResponse(body)

    # Base64 codes may contain "/", hence the path converter.
    @app.get("/{code:path}")
    def decode(code: str) -> Response:
        """Redirect (307) to the URL encoded in `code`; 400 if it does not decode."""
        if not code:
            return PlainTextResponse("404 page not found", status_code=404)
        return RedirectResponse(url=manager.expand(code), status_code=307)

    return app


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()
