"""Main entry point for the Boardwatch application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from boardwatch.api.v1 import (
    auth_router,
    lines_router,
    requests_router,
    users_router,
    vehicles_router,
)
from boardwatch.core.settings import settings
from boardwatch.db.bootstrap import ensure_schema
from boardwatch.db.session import engine

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Boardwatch API",
    description="Track approaching buses from a stop and confirm boarding",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(requests_router, prefix="/api")
app.include_router(vehicles_router, prefix="/api")
app.include_router(lines_router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies and query parameters as 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.on_event("startup")
async def on_startup() -> None:
    if settings.bootstrap_schema_on_startup:
        applied = ensure_schema(engine)
        logger.info("Schema bootstrap complete (%d changes)", len(applied))


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run("boardwatch.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
