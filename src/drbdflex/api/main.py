"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .. import __version__
from ..core.config import get_settings
from ..core.logging_config import setup_logging
from .routes import resources_router, volumes_router
from .routes.resources import global_router as capacity_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(
        "%s %s using %s (provisioner id %s)",
        settings.app_name,
        __version__,
        settings.drbdmanage_bin,
        settings.provisioner_id,
    )

    yield


app = FastAPI(
    title="drbdflex API",
    description="""
    drbdflex - DRBD Manage backed volume provisioner

    - **Volumes**: provision and delete volumes from claims
    - **Resources**: inspect, assign and unassign DRBD Manage resources
    - **Capacity**: pre-flight free-space checks
    """,
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(volumes_router, prefix="/api/v1")
app.include_router(resources_router, prefix="/api/v1")
app.include_router(capacity_router, prefix="/api/v1")


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "drbdflex API",
        "version": __version__,
        "description": "DRBD Manage backed volume provisioner",
    }


@app.get("/health")
def health():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "provisioner": settings.provisioner_name,
        "provisioner_id": settings.provisioner_id,
    }


def run():
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "drbdflex.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
