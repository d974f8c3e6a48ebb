"""FastAPI app entry point for the Tyre Manager API."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.api.routes import router
from app.config import get_settings, validate_settings
from app.core.logging import log_error, log_request, log_response, logger
from app.core.rate_limit import limiter
from app.services.data_store import DataStoreError

# Validate settings on startup
try:
    validate_settings()
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Starting Tyre Manager API...")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Tyre Manager API",
    description="Vehicles, tyre purchases, warranties, services and a tyre size calculator",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter

# CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    log_error("Rate limit exceeded", client=get_remote_address(request))
    return JSONResponse(
        status_code=429, content={"detail": "Rate limit exceeded. Try again later."}
    )


@app.exception_handler(DataStoreError)
async def data_store_error_handler(request: Request, exc: DataStoreError):
    log_error("Data store error", exc, path=request.url.path)
    return JSONResponse(status_code=502, content={"detail": "Data store unavailable"})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    log_request(request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    log_response(request.method, request.url.path, response.status_code, duration_ms)

    return response


# Routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "tyre-manager-api"}
