"""FastAPI main application for the content registry."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from content_registry import __version__
from content_registry.config import Config
from content_registry.logging_config import setup_logging
from content_registry.registry import init_registry

from .routes import builtin_prompts, builtin_resources, protocol

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    setup_logging(Config.LOG_LEVEL)
    for issue in Config.validate():
        logger.warning(issue)
    backend = init_registry()
    logger.info(f"Content registry starting up ({backend} backend)")
    yield
    logger.info("Content registry shut down cleanly")


# Create FastAPI app
app = FastAPI(
    title="Content Registry API",
    description="Built-in prompts and resources for protocol listings",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(builtin_prompts.router, prefix="/api/builtin-prompts", tags=["Builtin Prompts"])
app.include_router(builtin_resources.router, prefix="/api/builtin-resources", tags=["Builtin Resources"])
app.include_router(protocol.router, prefix="/api/mcp", tags=["Protocol"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}
