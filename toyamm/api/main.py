"""FastAPI application for the pool service.

Note: Authentication is not implemented here. The caller identity is read
from the X-Account-Id header, which the fronting host must set.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toyamm.api.endpoints import router
from toyamm.errors import (
    AlreadyInitialized,
    AmmError,
    NotInitialized,
    TransferAlreadyResolved,
    Unauthorized,
    UnknownTransfer,
)
from toyamm.log_config import configure_logging
from toyamm.safe_int import SafeIntError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("AMM_LOG_LEVEL", "INFO")

# Errors not listed here are rejections of the request itself (422)
ERROR_STATUS: dict[type[AmmError], int] = {
    Unauthorized: 403,
    UnknownTransfer: 404,
    AlreadyInitialized: 409,
    TransferAlreadyResolved: 409,
    NotInitialized: 503,
}

app = FastAPI(
    title="ToyAMM",
    description="Two-asset constant-product pool with an internal deposit ledger",
    version="0.1.0",
)

app.include_router(router)


def status_for(error: AmmError) -> int:
    """HTTP status for a pool error."""
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 422


@app.exception_handler(AmmError)
async def amm_error_handler(request: Request, exc: AmmError) -> JSONResponse:
    """Turn pool errors into {"error": CODE, "detail": message} bodies."""
    status = status_for(exc)
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.code,
        detail=str(exc),
        status=status,
    )
    return JSONResponse(status_code=status, content={"error": exc.code, "detail": str(exc)})


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    """Arithmetic invariant violations (reserve underflow, u128 overflow)."""
    logger.error("arithmetic_violation", path=request.url.path, detail=str(exc))
    return JSONResponse(
        status_code=422,
        content={"error": "ARITHMETIC_VIOLATION", "detail": str(exc)},
    )


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    - AMM_LOG_LEVEL: structlog level (default: INFO)
    - AMM_OWNER, AMM_ASSET0, AMM_ASSET1: Initialize the pool at startup
    """
    configure_logging(LOG_LEVEL)
    uvicorn.run(
        "toyamm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
