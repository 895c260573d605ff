"""
Cache models for AgentFit
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CacheKind(str, Enum):
    """Entry kinds, each with its own retention period."""

    RESUME_DEFAULT = "resume_default"        # 30 days
    JOB_CURRENT = "job_current"              # 7 days
    RESUME_PROCESSING = "resume_processing"  # 7 days
    SCORING_RESULT = "scoring_result"        # 1 day
    AGENT_RESULT = "agent_result"            # 1 day


class CacheUsage(BaseModel):
    hits: int = 0
    last_accessed: datetime | None = None


class CacheEntry(BaseModel):
    """One stored payload. Lives until expires_at; read lazily checks expiry."""

    id: str
    user_id: str
    kind: CacheKind
    payload: Any
    created_at: datetime
    expires_at: datetime
    usage: CacheUsage = Field(default_factory=CacheUsage)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CacheStats(BaseModel):
    """Aggregate counts over live and expired entries."""

    total_entries: int = 0
    by_kind: dict[str, int] = Field(default_factory=dict)
    total_hits: int = 0
    average_hits: float = 0.0
