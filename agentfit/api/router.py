"""
Main API router for AgentFit

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from agentfit.api.endpoints import activity, cache, scoring, tailoring

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    scoring.router,
    prefix="/scoring",
    tags=["Scoring"]
)

api_router.include_router(
    tailoring.router,
    prefix="/tailoring",
    tags=["Tailoring"]
)

api_router.include_router(
    cache.router,
    prefix="/cache",
    tags=["Cache"]
)

api_router.include_router(
    activity.router,
    prefix="/activity",
    tags=["Activity"]
)
