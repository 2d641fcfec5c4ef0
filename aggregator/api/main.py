"""FastAPI application exposing the aggregator over HTTP.

Note: Authentication and rate limiting are not implemented here. They belong
to the infrastructure layer in front of the service.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from aggregator import dex_aggregator
from aggregator.api.endpoints import router
from aggregator.log_config import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AGGREGATOR_HOST", "0.0.0.0")
PORT = int(os.environ.get("AGGREGATOR_PORT", "8000"))
DEBUG = os.environ.get("AGGREGATOR_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("AGGREGATOR_LOG_LEVEL", "DEBUG" if DEBUG else "INFO")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup, close the shared HTTP client on shutdown."""
    configure_logging(LOG_LEVEL)
    yield
    if dex_aggregator._default_aggregator is not None:
        await dex_aggregator._default_aggregator.aclose()


app = FastAPI(
    title="DEX Aggregator",
    description="Quote aggregation and best-route selection across DEXes",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - AGGREGATOR_HOST: Host to bind to (default: 0.0.0.0)
    - AGGREGATOR_PORT: Port to bind to (default: 8000)
    - AGGREGATOR_DEBUG: Enable debug/reload mode (default: false)
    - AGGREGATOR_LOG_LEVEL: Log level (default: INFO, DEBUG in debug mode)
    """
    uvicorn.run(
        "aggregator.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
