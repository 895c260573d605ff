"""
Activity API endpoints

Handles:
- Listing recent model calls with token usage and cost
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from agentfit.api.dependencies import get_engine, require_user_id
from agentfit.core.activity import ActivityEvent
from agentfit.core.engine import MatchEngine

router = APIRouter()


class ActivityResponse(BaseModel):
    """Response model for the activity listing."""
    events: list[ActivityEvent]
    total_tokens: int
    estimated_cost: float


@router.get("", response_model=ActivityResponse)
async def list_activity(
    limit: int = Query(default=50, ge=1, le=500),
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> ActivityResponse:
    """Most recent activity for the caller, newest first."""
    events = engine.activity.recent(user_id, limit) if engine.activity else []
    return ActivityResponse(
        events=events,
        total_tokens=sum(e.token_usage for e in events),
        estimated_cost=round(sum(e.metadata.get("estimated_cost", 0.0) for e in events), 6),
    )
