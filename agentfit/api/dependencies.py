"""
API Dependencies

Provides dependency injection for API endpoints. The engine is built in
the application lifespan and stored on app.state; endpoints receive it
through get_engine so tests can override it.
"""

from fastapi import Header, HTTPException, Request

from agentfit.config.settings import get_settings
from agentfit.core.engine import MatchEngine


def create_engine() -> MatchEngine:
    """Build the engine from application settings."""
    return MatchEngine.from_settings(get_settings())


def get_engine(request: Request) -> MatchEngine:
    """Get the engine created at startup."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def get_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """Caller identity from the X-User-Id header (authentication happens upstream)."""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    user_id = get_user_id(x_user_id)
    if not user_id:
        raise HTTPException(status_code=400, detail="X-User-Id header is required")
    return user_id


async def cleanup(engine: MatchEngine | None):
    """Cleanup resources on shutdown."""
    if engine:
        await engine.close()
