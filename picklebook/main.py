"""PickleBook development API.

Serves the mock booking engine over HTTP so the mobile app can run against
it during development.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from picklebook.core.config import settings
from picklebook.core.storage import create_storage
from picklebook.routes import auth, bookings, games, profile
from picklebook.services.booking_rules import BookingViolation
from picklebook.services.cache import CacheService
from picklebook.services.errors import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    MockApiError,
    NotFoundError,
)
from picklebook.services.mock_api import MockApi

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    storage = create_storage(settings)
    app.state.storage = storage
    app.state.mock_api = MockApi(storage)
    app.state.cache = CacheService(storage)
    logger.info("Using %s storage", settings.storage_backend)
    yield
    await app.state.cache.close()
    await storage.close()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url=f"{settings.api_prefix}/docs",
    openapi_url=f"{settings.api_prefix}/openapi.json",
    lifespan=lifespan,
)

# CORS - permissive in dev, lock down in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routes
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(profile.router, prefix=settings.api_prefix)
app.include_router(games.router, prefix=settings.api_prefix)
app.include_router(bookings.router, prefix=settings.api_prefix)


_STATUS_BY_ERROR: list[tuple[type[MockApiError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidRequestError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
]


@app.exception_handler(MockApiError)
async def mock_api_error_handler(request: Request, exc: MockApiError):
    code = next((c for cls, c in _STATUS_BY_ERROR if isinstance(exc, cls)), status.HTTP_400_BAD_REQUEST)
    detail: str | list[dict] = exc.message
    if isinstance(exc, BookingViolation):
        detail = [{"rule": exc.rule, "message": exc.message}]
    return JSONResponse(status_code=code, content={"detail": detail})


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.app_name}
