"""
Tailoring models for AgentFit

Structures for the multi-agent document rewrite and the single-prompt
document edit.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from agentfit.models.agents import TailoringAgentResultSet
from agentfit.models.usage import TokenUsage, UsageTotals


class TailoringSummary(BaseModel):
    """How the tailored document was produced."""

    agents_executed: int
    successful_agents: list[str] = Field(default_factory=list)
    failed_agents: list[str] = Field(default_factory=list)
    total_execution_time_ms: int
    tailoring_version: str
    is_fallback: bool = False


class TailoringOrchestrationResult(BaseModel):
    """The merged rewrite produced from every tailoring agent."""

    final_document: str = Field(..., min_length=1)
    priority_changes: list[str] = Field(default_factory=list)
    change_summary: str = ""
    expected_score_improvements: list[str] = Field(default_factory=list)
    conflicts_resolved: list[str] = Field(default_factory=list)
    consistency_improvements: list[str] = Field(default_factory=list)
    readability_enhancements: list[str] = Field(default_factory=list)
    execution_summary: TailoringSummary
    usage: TokenUsage | None = None

    @property
    def is_fallback(self) -> bool:
        return self.execution_summary.is_fallback


class TailoringReport(BaseModel):
    """Top-level result of tailoring a document for one job."""

    job_id: str
    result: TailoringOrchestrationResult
    usage: UsageTotals
    agent_results: TailoringAgentResultSet
    processed_at: datetime
    total_processing_time_ms: int
    from_cache: bool = False


class EditMode(str, Enum):
    """Single-prompt editing modes."""

    AGENT = "agent"          # rewrite the document
    ASK = "ask"              # advice only
    PROOFREAD = "proofread"  # grammar, spelling and formatting fixes


class EditResult(BaseModel):
    """Result of a single-prompt document edit."""

    mode: EditMode
    success: bool
    updated_document: str | None = None
    change_summary: str | None = None
    advice: str | None = None
    error: str | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)
