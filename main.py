"""
AgentFit - Multi-Agent Candidate Scoring and Document Tailoring

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentfit.config.settings import get_settings
from agentfit.api.router import api_router
from agentfit.api.dependencies import cleanup, create_engine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting AgentFit...")
    settings = get_settings()
    logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; every agent will fall back")
    app.state.engine = create_engine()

    yield

    # Shutdown
    logger.info("Shutting down AgentFit...")
    await cleanup(getattr(app.state, "engine", None))
    app.state.engine = None


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title="AgentFit",
    description="Multi-agent candidate scoring and document tailoring",
    version=settings.app_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router, prefix="/api")


# ============================================================================
# ROOT ROUTES
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
