"""
Scoring models for AgentFit

Defines the score categories, the category weights and the structure
of the final candidate-job verdict.
"""

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentfit.models.agents import AgentKind, AgentResultSet
from agentfit.models.usage import TokenUsage, UsageTotals


class ScoreCategory(str, Enum):
    """Qualitative match categories."""

    EXCEPTIONAL = "exceptional"  # 90-100
    STRONG = "strong"            # 80-89
    GOOD = "good"                # 70-79
    FAIR = "fair"                # 60-69
    WEAK = "weak"                # 45-59
    POOR = "poor"                # 0-44


class ScoreSource(str, Enum):
    """Which number became the overall score."""

    MODEL = "model"
    CALCULATED = "calculated"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CategoryDetails(BaseModel):
    """Display and decision data attached to a score category."""

    model_config = ConfigDict(frozen=True)

    label: str
    description: str
    action: str
    color: str
    min_score: int
    max_score: int


SCORE_CATEGORIES: Mapping[ScoreCategory, CategoryDetails] = MappingProxyType({
    ScoreCategory.EXCEPTIONAL: CategoryDetails(
        label="Exceptional Match",
        description="Perfect candidate - immediate hire recommendation",
        action="Fast Track to Final Round",
        color="#10B981",
        min_score=90,
        max_score=100,
    ),
    ScoreCategory.STRONG: CategoryDetails(
        label="Strong Candidate",
        description="Excellent fit with minor gaps - strong hire",
        action="Proceed to Technical Interview",
        color="#059669",
        min_score=80,
        max_score=89,
    ),
    ScoreCategory.GOOD: CategoryDetails(
        label="Good Potential",
        description="Solid candidate with some development areas",
        action="Standard Interview Process",
        color="#D97706",
        min_score=70,
        max_score=79,
    ),
    ScoreCategory.FAIR: CategoryDetails(
        label="Fair Match",
        description="Possible candidate with notable gaps",
        action="Phone Screen First",
        color="#F59E0B",
        min_score=60,
        max_score=69,
    ),
    ScoreCategory.WEAK: CategoryDetails(
        label="Weak Match",
        description="Significant gaps - consider for other roles",
        action="Consider for Junior/Alternative Roles",
        color="#EF4444",
        min_score=45,
        max_score=59,
    ),
    ScoreCategory.POOR: CategoryDetails(
        label="Poor Match",
        description="Not qualified for this position",
        action="Do Not Proceed",
        color="#DC2626",
        min_score=0,
        max_score=44,
    ),
})

SCORING_WEIGHTS: Mapping[AgentKind, float] = MappingProxyType({
    AgentKind.TECHNICAL_SKILLS: 0.25,
    AgentKind.EXPERIENCE_DEPTH: 0.25,
    AgentKind.ACHIEVEMENTS: 0.20,
    AgentKind.EDUCATION: 0.10,
    AgentKind.SOFT_SKILLS: 0.10,
    AgentKind.CAREER_PROGRESSION: 0.10,
})


def category_for_score(score: int) -> ScoreCategory:
    """Map an integer score in [0, 100] to its category."""
    bounded = max(0, min(100, score))
    for category, details in SCORE_CATEGORIES.items():
        if details.min_score <= bounded <= details.max_score:
            return category
    return ScoreCategory.POOR


class CategoryBreakdown(BaseModel):
    """One scored category in the final verdict."""

    score: float = Field(..., ge=0, le=100)
    reasoning: str = ""
    weight: float = Field(..., ge=0, le=1)
    is_fallback: bool = False


class ImprovementPlan(BaseModel):
    short_term: str = ""
    mid_term: str = ""
    long_term: str = ""


class WeaknessDetail(BaseModel):
    """A weakness with its impact and a staged improvement plan."""

    weakness: str
    impact: str = ""
    severity: Severity = Severity.MEDIUM
    improvement_plan: ImprovementPlan = Field(default_factory=ImprovementPlan)


class InterviewFocusArea(BaseModel):
    """Guidance for one interview topic."""

    category: str
    areas: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)


class ExecutionSummary(BaseModel):
    """How the verdict was produced."""

    agents_executed: int
    total_execution_time_ms: int
    scoring_version: str
    model_score: float | None = None
    calculated_score: float
    score_source: ScoreSource
    fallback_agents: list[str] = Field(default_factory=list)
    is_fallback: bool = False


class OrchestrationResult(BaseModel):
    """The combined candidate-job verdict."""

    overall_score: int = Field(..., ge=0, le=100)
    category: ScoreCategory
    category_details: CategoryDetails
    breakdown: dict[AgentKind, CategoryBreakdown]
    key_strengths: list[str] = Field(default_factory=list)
    key_weaknesses: list[WeaknessDetail] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    positive_indicators: list[str] = Field(default_factory=list)
    hiring_recommendation: str = Field(..., min_length=1)
    interview_focus: list[InterviewFocusArea] = Field(default_factory=list)
    execution_summary: ExecutionSummary
    usage: TokenUsage | None = None

    @field_validator("key_weaknesses", mode="before")
    @classmethod
    def _normalize_weaknesses(cls, value: Any) -> Any:
        """Plain strings become WeaknessDetail entries."""
        if not isinstance(value, list):
            return value
        return [{"weakness": item} if isinstance(item, str) else item for item in value]

    @property
    def is_fallback(self) -> bool:
        return self.execution_summary.is_fallback


class ScoreReport(BaseModel):
    """Top-level result of scoring one candidate against one job."""

    job_id: str
    result: OrchestrationResult
    usage: UsageTotals
    agent_results: AgentResultSet
    processed_at: datetime
    total_processing_time_ms: int
    from_cache: bool = False

    @property
    def has_fallback(self) -> bool:
        return self.result.is_fallback or self.agent_results.has_fallback
