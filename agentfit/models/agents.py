"""
Agent models for AgentFit

Defines the fixed agent rosters and the per-agent result records the
dispatcher collects.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from agentfit.models.usage import TokenUsage


class AgentKind(str, Enum):
    """Scoring roster: six scored categories plus two qualitative analyses."""

    TECHNICAL_SKILLS = "technical_skills"
    EXPERIENCE_DEPTH = "experience_depth"
    ACHIEVEMENTS = "achievements"
    EDUCATION = "education"
    SOFT_SKILLS = "soft_skills"
    CAREER_PROGRESSION = "career_progression"
    STRENGTHS = "strengths"
    WEAKNESSES = "weaknesses"

    @property
    def is_scoring(self) -> bool:
        return self in SCORING_KINDS


SCORING_KINDS: tuple[AgentKind, ...] = (
    AgentKind.TECHNICAL_SKILLS,
    AgentKind.EXPERIENCE_DEPTH,
    AgentKind.ACHIEVEMENTS,
    AgentKind.EDUCATION,
    AgentKind.SOFT_SKILLS,
    AgentKind.CAREER_PROGRESSION,
)

ANALYSIS_KINDS: tuple[AgentKind, ...] = (
    AgentKind.STRENGTHS,
    AgentKind.WEAKNESSES,
)


class TailoringAgentKind(str, Enum):
    """Tailoring roster: each agent rewrites one aspect of the document."""

    SKILLS_OPTIMIZATION = "skills_optimization"
    EXPERIENCE_REFRAMING = "experience_reframing"
    ACHIEVEMENT_AMPLIFICATION = "achievement_amplification"
    KEYWORD_OPTIMIZATION = "keyword_optimization"
    PROFESSIONAL_SUMMARY = "professional_summary"
    EDUCATION_CERTIFICATIONS = "education_certifications"
    GAP_MITIGATION = "gap_mitigation"
    INDUSTRY_ALIGNMENT = "industry_alignment"


class AgentResult(BaseModel):
    """Outcome of one agent invocation. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    kind: AgentKind | TailoringAgentKind
    output: dict[str, Any] = Field(default_factory=dict)
    executed_at: datetime
    execution_time_ms: int = Field(default=0, ge=0)
    success: bool
    is_fallback: bool = False
    error: str | None = None
    usage: TokenUsage | None = None
    from_cache: bool = False

    @property
    def category_score(self) -> float | None:
        """Numeric score for scoring agents, None for analysis and tailoring agents."""
        score = self.output.get("category_score")
        return float(score) if score is not None else None

    @property
    def reasoning(self) -> str:
        return str(self.output.get("reasoning", ""))


class ExecutionMetadata(BaseModel):
    """Timing recorded by the dispatcher for one roster run."""

    model_config = ConfigDict(frozen=True)

    total_execution_time_ms: int = Field(..., ge=0)
    agents_executed: int = Field(..., ge=0)
    timestamp: datetime


class AgentResultSet(BaseModel):
    """All eight scoring-roster results for one request."""

    model_config = ConfigDict(frozen=True)

    scoring: dict[AgentKind, AgentResult]
    analysis: dict[AgentKind, AgentResult]
    metadata: ExecutionMetadata

    def all_results(self) -> list[AgentResult]:
        return [*self.scoring.values(), *self.analysis.values()]

    def get(self, kind: AgentKind) -> AgentResult | None:
        return self.scoring.get(kind) or self.analysis.get(kind)

    @property
    def fallback_kinds(self) -> list[AgentKind]:
        """Kinds whose result is a fallback, in roster order."""
        return [r.kind for r in self.all_results() if r.is_fallback]

    @property
    def has_fallback(self) -> bool:
        return bool(self.fallback_kinds)

    def agent_timings(self) -> dict[str, int]:
        """Per-agent execution time in milliseconds."""
        return {r.kind.value: r.execution_time_ms for r in self.all_results()}


class TailoringAgentResultSet(BaseModel):
    """All eight tailoring-roster results for one request."""

    model_config = ConfigDict(frozen=True)

    results: dict[TailoringAgentKind, AgentResult]
    metadata: ExecutionMetadata

    def all_results(self) -> list[AgentResult]:
        return list(self.results.values())

    @property
    def successful_kinds(self) -> list[TailoringAgentKind]:
        return [kind for kind, r in self.results.items() if r.success]

    @property
    def failed_kinds(self) -> list[TailoringAgentKind]:
        return [kind for kind, r in self.results.items() if not r.success]

    @property
    def has_fallback(self) -> bool:
        return any(r.is_fallback for r in self.results.values())

    @property
    def success_rate(self) -> float:
        """Percentage of tailoring agents that succeeded."""
        if not self.results:
            return 0.0
        return round(len(self.successful_kinds) / len(self.results) * 100, 1)

    def agent_timings(self) -> dict[str, int]:
        return {kind.value: r.execution_time_ms for kind, r in self.results.items()}
