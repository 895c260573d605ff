"""
Data models and schemas for AgentFit

Contains Pydantic models for:
- Candidate profiles and job postings
- Agent rosters and agent results
- Scoring verdicts and categories
- Tailoring and editing results
- Cache entries
- Model reply schemas
"""

from agentfit.models.agents import (
    ANALYSIS_KINDS,
    SCORING_KINDS,
    AgentKind,
    AgentResult,
    AgentResultSet,
    ExecutionMetadata,
    TailoringAgentKind,
    TailoringAgentResultSet,
)
from agentfit.models.cache import CacheEntry, CacheKind, CacheStats, CacheUsage
from agentfit.models.profile import CandidateProfile, JobPosting, content_hash
from agentfit.models.scoring import (
    SCORE_CATEGORIES,
    SCORING_WEIGHTS,
    CategoryBreakdown,
    CategoryDetails,
    ExecutionSummary,
    InterviewFocusArea,
    OrchestrationResult,
    ScoreCategory,
    ScoreReport,
    ScoreSource,
    WeaknessDetail,
    category_for_score,
)
from agentfit.models.tailoring import (
    EditMode,
    EditResult,
    TailoringOrchestrationResult,
    TailoringReport,
    TailoringSummary,
)
from agentfit.models.usage import TokenUsage, UsageTotals

__all__ = [
    # Agents
    "ANALYSIS_KINDS",
    "SCORING_KINDS",
    "AgentKind",
    "AgentResult",
    "AgentResultSet",
    "ExecutionMetadata",
    "TailoringAgentKind",
    "TailoringAgentResultSet",
    # Cache
    "CacheEntry",
    "CacheKind",
    "CacheStats",
    "CacheUsage",
    # Inputs
    "CandidateProfile",
    "JobPosting",
    "content_hash",
    # Scoring
    "SCORE_CATEGORIES",
    "SCORING_WEIGHTS",
    "CategoryBreakdown",
    "CategoryDetails",
    "ExecutionSummary",
    "InterviewFocusArea",
    "OrchestrationResult",
    "ScoreCategory",
    "ScoreReport",
    "ScoreSource",
    "WeaknessDetail",
    "category_for_score",
    # Tailoring
    "EditMode",
    "EditResult",
    "TailoringOrchestrationResult",
    "TailoringReport",
    "TailoringSummary",
    # Usage
    "TokenUsage",
    "UsageTotals",
]
