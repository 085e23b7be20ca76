"""
FastAPI application for the media summarization pipeline.

Provides HTTP API with SSE progress streaming and background jobs.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from vidscribe.api import routes, websocket
from vidscribe.config import get_settings, validate_required_settings
from vidscribe.logging_config import setup_logging
from vidscribe.services.handles import ServiceHandles
from vidscribe.services.pipeline import PipelineOrchestrator

# Configure logging before anything else
settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Validates mandatory configuration (ConfigurationError aborts startup),
    builds the shared service handles and closes them on shutdown.
    """
    logger.info("Starting VidScribe API")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Downloads directory: {settings.downloads_dir}")

    validate_required_settings(settings)
    settings.downloads_dir.mkdir(parents=True, exist_ok=True)

    handles = ServiceHandles.from_settings(settings)
    app.state.handles = handles
    app.state.orchestrator = PipelineOrchestrator.from_handles(handles)

    logger.info(
        f"Enrichment: {handles.primary.display_name} "
        f"(failover: {handles.secondary.display_name})"
    )

    try:
        yield
    finally:
        await handles.aclose()
        logger.info("Shutting down VidScribe API")


app = FastAPI(
    title="VidScribe API",
    description="Media URL or text to transcript, summary and content ideas",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(routes.router)
app.include_router(websocket.router)


@app.get("/health")
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns:
        Basic health status
    """
    return {"status": "ok"}


@app.get("/health/services")
async def services_health(request: Request) -> dict:
    """
    Check external services availability.

    Returns:
        Speech-to-text reachability, provider names, credential material
    """
    handles: ServiceHandles | None = getattr(request.app.state, "handles", None)
    if handles is None:
        return {"status": "not initialized"}
    return await handles.check_services()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vidscribe.main:app",
        host="0.0.0.0",
        port=8801,
        reload=True,
    )
