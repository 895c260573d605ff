"""
Activity logging for AgentFit

Records one event per agent or orchestration call with its token usage
so usage can be attributed to users. Recording must never block or fail
the operation being recorded.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from agentfit.models.usage import TokenUsage

logger = logging.getLogger(__name__)


class ActivityType:
    JOB_SCORING_AGENT = "job_scoring_agent"
    JOB_SCORING_ORCHESTRATION = "job_scoring_orchestration"
    RESUME_TAILORING_AGENT = "resume_tailoring_agent"
    RESUME_TAILORING_ORCHESTRATION = "resume_tailoring_orchestration"
    RESUME_EDIT = "resume_edit"


class ActivityEvent(BaseModel):
    user_id: str
    activity_type: str
    token_usage: int = 0
    time_taken_seconds: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ActivityLogger:
    """Bounded in-memory activity log."""

    def __init__(self, capacity: int = 1000):
        self._events: deque[ActivityEvent] = deque(maxlen=capacity)

    def record(
        self,
        user_id: str,
        activity_type: str,
        usage: TokenUsage | None,
        execution_time_ms: int,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityEvent | None:
        """Record one call. Failures are logged and swallowed."""
        try:
            usage = usage or TokenUsage()
            event = ActivityEvent(
                user_id=user_id,
                activity_type=activity_type,
                token_usage=usage.total_tokens,
                time_taken_seconds=execution_time_ms / 1000,
                metadata={
                    **(metadata or {}),
                    "prompt_tokens": usage.prompt_tokens,
                    "completion_tokens": usage.completion_tokens,
                    "cached_tokens": usage.cached_tokens,
                    "cache_hit_rate": usage.cache_hit_rate,
                    "estimated_cost": usage.estimated_cost,
                    "cost_savings": usage.cost_savings,
                    "execution_time_ms": execution_time_ms,
                },
            )
            self._events.append(event)
            logger.info(
                f"Activity {activity_type} | user={user_id} | tokens={usage.total_tokens} | "
                f"cost=${usage.estimated_cost:.6f} | {execution_time_ms}ms"
            )
            return event
        except Exception as e:
            logger.warning(f"Failed to record activity {activity_type}: {e}")
            return None

    def recent(self, user_id: str | None = None, limit: int = 50) -> list[ActivityEvent]:
        """Most recent events first."""
        events = [e for e in reversed(self._events) if user_id is None or e.user_id == user_id]
        return events[:limit]

    def __len__(self) -> int:
        return len(self._events)
