"""Music Gateway - CORS and signing proxy for the Meting API and audio CDNs."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

import config
from routers import proxy
from settings import get_settings

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Load and validate settings once
    get_settings()
    yield
    # Shutdown: Release pooled upstream connections
    await proxy.close_client()


app = FastAPI(
    title="Music Gateway",
    description="Stateless gateway for the Meting metadata API and allow-listed audio hosts",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS headers are set by the gateway endpoint; CORSMiddleware would
# intercept its pre-flight responses.
app.include_router(proxy.router, prefix="/proxy")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server:app", host=config.HOST, port=config.PORT, reload=config.DEBUG)
