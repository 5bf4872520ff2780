"""FastAPI application for basket pools."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from basket_amm import __version__
from basket_amm.api.endpoints import router
from basket_amm.errors import BasketError, InvalidAsset, ReentrancyDetected, Unauthorized

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("BASKET_HOST", "0.0.0.0")
PORT = int(os.environ.get("BASKET_PORT", "8000"))
DEBUG = os.environ.get("BASKET_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

ERROR_STATUS: dict[type[BasketError], int] = {
    Unauthorized: 403,
    InvalidAsset: 404,
    ReentrancyDetected: 409,
}

app = FastAPI(
    title="Basket AMM",
    description="Invariant-curve AMM for baskets of near-equal-value assets",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


def status_for(error: BasketError) -> int:
    """HTTP status for an engine error; 400 unless listed in ERROR_STATUS."""
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


@app.exception_handler(BasketError)
async def basket_error_handler(request: Request, exc: BasketError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def configure_logging(debug: bool = DEBUG) -> None:
    """Configure structlog for the server process."""
    log_level = logging.DEBUG if debug else logging.INFO
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


def run() -> None:
    """Run the basket API server.

    Configuration via environment variables:
    - BASKET_HOST: Host to bind to (default: 0.0.0.0)
    - BASKET_PORT: Port to bind to (default: 8000)
    - BASKET_DEBUG: Enable debug logging and reload mode (default: false)
    - BASKET_POOLS_FILE: JSON file describing the pools to serve
    """
    configure_logging()
    uvicorn.run(
        "basket_amm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
