"""
Orchestration Aggregators for AgentFit

Combine a roster's results into one verdict. The orchestration model
call does the qualitative synthesis; its overall score is checked
against an independently computed weighted average and replaced by it
when the two diverge by more than the configured threshold. When the
orchestration call itself fails, a purely local combination is returned
so the pipeline always produces a structurally complete result.
"""

import json
import logging
import math
import time
from typing import Any, Mapping

from agentfit.config.settings import Settings, get_settings
from agentfit.core.activity import ActivityLogger, ActivityType
from agentfit.core.agent_runner import NO_SCORING_ANALYSIS, DEFAULT_USER_REQUEST, job_description_text
from agentfit.core.prompt_executor import ExecutionOptions, PromptExecutor, PromptResponse
from agentfit.models.agents import (
    SCORING_KINDS,
    AgentKind,
    AgentResult,
    AgentResultSet,
    TailoringAgentResultSet,
)
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.models.scoring import (
    SCORE_CATEGORIES,
    SCORING_WEIGHTS,
    CategoryBreakdown,
    ExecutionSummary,
    InterviewFocusArea,
    OrchestrationResult,
    ScoreSource,
    category_for_score,
)
from agentfit.models.tailoring import TailoringOrchestrationResult, TailoringSummary
from agentfit.models.usage import TokenUsage
from agentfit.prompts.scoring import SCORING_ORCHESTRATION_TEMPLATE_ID
from agentfit.prompts.tailoring import TAILORING_ORCHESTRATION_TEMPLATE_ID

logger = logging.getLogger(__name__)

SCORING_VERSION = "3.0-multi-agent"
SCORING_FALLBACK_VERSION = "3.0-multi-agent-fallback"
TAILORING_VERSION = "2.0-multi-agent"
TAILORING_FALLBACK_VERSION = "2.0-multi-agent-fallback"


def calculate_weighted_score(
    scores: Mapping[AgentKind, float],
    weights: Mapping[AgentKind, float] = SCORING_WEIGHTS,
) -> float:
    """
    Weighted average of category scores, normalized by the weights present.

    Returns 0.0 when no weighted category is present.
    """
    total = 0.0
    total_weight = 0.0
    for kind, score in scores.items():
        weight = weights.get(kind, 0.0)
        total += score * weight
        total_weight += weight
    # rounded to absorb float drift in the weight sum
    return round(total / total_weight, 6) if total_weight > 0 else 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else f"{score:.1f}"


class BaseAggregator:
    """Executor, settings and activity wiring shared by the aggregators."""

    def __init__(
        self,
        executor: PromptExecutor,
        settings: Settings | None = None,
        activity: ActivityLogger | None = None,
    ):
        self.executor = executor
        self.settings = settings or get_settings()
        self.activity = activity

    def _record(
        self,
        user_id: str | None,
        activity_type: str,
        job: JobPosting,
        response: PromptResponse,
        execution_time_ms: int,
    ) -> None:
        if not (user_id and self.activity) or response.usage.total_tokens == 0:
            return
        self.activity.record(
            user_id=user_id,
            activity_type=activity_type,
            usage=response.usage,
            execution_time_ms=execution_time_ms,
            metadata={
                "agent_type": "orchestration",
                "model": response.metadata.get("model"),
                "job_id": job.id,
                "job_title": job.title,
                "company": job.company,
                "success": response.success,
            },
        )


class OrchestrationAggregator(BaseAggregator):
    """Combines a scoring-roster result set into an OrchestrationResult."""

    # =========================================================================
    # CATEGORY SCORES
    # =========================================================================

    def category_scores(self, result_set: AgentResultSet) -> dict[AgentKind, CategoryBreakdown]:
        """
        Score, reasoning and weight for every scored category.

        Fallback results contribute their fallback score; a category with
        no result at all contributes the missing-agent score. Both are
        flagged and tagged in the reasoning.
        """
        breakdown: dict[AgentKind, CategoryBreakdown] = {}
        for kind in SCORING_KINDS:
            result = result_set.scoring.get(kind)
            weight = SCORING_WEIGHTS[kind]
            if result is None or result.category_score is None:
                breakdown[kind] = CategoryBreakdown(
                    score=self.settings.missing_agent_score,
                    reasoning="[fallback] Agent not executed - using fallback score",
                    weight=weight,
                    is_fallback=True,
                )
            elif result.is_fallback:
                breakdown[kind] = CategoryBreakdown(
                    score=result.category_score,
                    reasoning=f"[fallback] {result.reasoning}",
                    weight=weight,
                    is_fallback=True,
                )
            else:
                breakdown[kind] = CategoryBreakdown(
                    score=result.category_score,
                    reasoning=result.reasoning or "Agent evaluation completed",
                    weight=weight,
                )
        return breakdown

    def calculated_score(self, breakdown: Mapping[AgentKind, CategoryBreakdown]) -> float:
        return calculate_weighted_score({kind: entry.score for kind, entry in breakdown.items()})

    # =========================================================================
    # COMBINATION
    # =========================================================================

    async def combine(
        self,
        result_set: AgentResultSet,
        candidate: CandidateProfile,
        job: JobPosting,
        user_id: str | None = None,
    ) -> OrchestrationResult:
        """
        Combine roster results into the final verdict.

        Args:
            result_set: Results from the scoring roster
            candidate: Candidate document
            job: Job posting

        Returns:
            OrchestrationResult (is_fallback=True when combined locally)
        """
        breakdown = self.category_scores(result_set)
        calculated = self.calculated_score(breakdown)

        started = time.perf_counter()
        response = await self.executor.execute_guarded(
            SCORING_ORCHESTRATION_TEMPLATE_ID,
            {
                "agent_results": self.serialize_results(result_set),
                "job": job.to_prompt_json(),
                "resume": candidate.resume,
            },
            ExecutionOptions(user_id=user_id, trace_metadata={"agent": "orchestration", "job_id": job.id}),
        )
        elapsed = int((time.perf_counter() - started) * 1000)
        self._record(user_id, ActivityType.JOB_SCORING_ORCHESTRATION, job, response, elapsed)

        if not response.success:
            logger.warning(f"Orchestration failed, combining locally: {response.error}")
            return self.local_fallback(result_set, breakdown, calculated, response.usage)

        return self.validate(response.data, result_set, breakdown, calculated, response.usage)

    def validate(
        self,
        reply: dict[str, Any],
        result_set: AgentResultSet,
        breakdown: dict[AgentKind, CategoryBreakdown],
        calculated: float,
        usage: TokenUsage | None = None,
    ) -> OrchestrationResult:
        """Apply the divergence check to a validated orchestration reply."""
        model_score = float(reply["overall_score"])
        divergence = abs(model_score - calculated)

        if divergence > self.settings.score_divergence_threshold:
            logger.warning(
                f"Orchestration score {model_score} diverges from calculated {calculated:.2f} "
                f"by {divergence:.2f}; using calculated score"
            )
            final_score, source = calculated, ScoreSource.CALCULATED
        else:
            final_score, source = model_score, ScoreSource.MODEL

        overall = round_half_up(final_score)
        category = category_for_score(overall)

        return OrchestrationResult(
            overall_score=overall,
            category=category,
            category_details=SCORE_CATEGORIES[category],
            breakdown=breakdown,
            key_strengths=reply.get("key_strengths") or [],
            key_weaknesses=reply.get("key_weaknesses") or [],
            red_flags=reply.get("red_flags") or [],
            positive_indicators=reply.get("positive_indicators") or [],
            hiring_recommendation=reply.get("hiring_recommendation") or "Standard evaluation recommended",
            interview_focus=reply.get("interview_focus") or [],
            execution_summary=ExecutionSummary(
                agents_executed=result_set.metadata.agents_executed,
                total_execution_time_ms=result_set.metadata.total_execution_time_ms,
                scoring_version=SCORING_VERSION,
                model_score=model_score,
                calculated_score=round(calculated, 2),
                score_source=source,
                fallback_agents=[k.value for k in result_set.fallback_kinds],
            ),
            usage=usage,
        )

    def local_fallback(
        self,
        result_set: AgentResultSet,
        breakdown: dict[AgentKind, CategoryBreakdown],
        calculated: float,
        usage: TokenUsage | None = None,
    ) -> OrchestrationResult:
        """Combine results without a model call."""
        overall = round_half_up(calculated)
        category = category_for_score(overall)
        details = SCORE_CATEGORIES[category]

        strengths = result_set.analysis.get(AgentKind.STRENGTHS)
        weaknesses = result_set.analysis.get(AgentKind.WEAKNESSES)
        key_strengths = list(strengths.output.get("top_strengths", [])) if strengths else []
        key_weaknesses = list(weaknesses.output.get("top_weaknesses", [])) if weaknesses else []

        red_flags: list[str] = []
        positive_indicators: list[str] = []
        for kind, entry in breakdown.items():
            if entry.is_fallback:
                continue
            label = kind.value.replace("_", " ")
            if entry.score < self.settings.red_flag_threshold:
                red_flags.append(f"Low {label} score ({format_score(entry.score)}%)")
            elif entry.score >= self.settings.positive_indicator_threshold:
                positive_indicators.append(f"Strong {label} performance ({format_score(entry.score)}%)")

        if red_flags:
            interview_focus = [
                InterviewFocusArea(category="Address identified gaps", areas=red_flags),
                InterviewFocusArea(category="Verify key strengths", areas=key_strengths[:3]),
            ]
        else:
            interview_focus = [InterviewFocusArea(category="Standard competency assessment")]

        return OrchestrationResult(
            overall_score=overall,
            category=category,
            category_details=details,
            breakdown=breakdown,
            key_strengths=key_strengths,
            key_weaknesses=key_weaknesses,
            red_flags=red_flags,
            positive_indicators=positive_indicators,
            hiring_recommendation=f"{details.action} - Overall score: {overall}%",
            interview_focus=interview_focus,
            execution_summary=ExecutionSummary(
                agents_executed=result_set.metadata.agents_executed,
                total_execution_time_ms=result_set.metadata.total_execution_time_ms,
                scoring_version=SCORING_FALLBACK_VERSION,
                calculated_score=round(calculated, 2),
                score_source=ScoreSource.CALCULATED,
                fallback_agents=[k.value for k in result_set.fallback_kinds],
                is_fallback=True,
            ),
            usage=usage,
        )

    @staticmethod
    def serialize_results(result_set: AgentResultSet) -> str:
        """Roster results as the orchestration prompt receives them."""

        def entry(result: AgentResult) -> dict[str, Any]:
            return {**result.output, "is_fallback": result.is_fallback}

        return json.dumps(
            {
                "scoring": {k.value: entry(r) for k, r in result_set.scoring.items()},
                "analysis": {k.value: entry(r) for k, r in result_set.analysis.items()},
                "execution_metadata": result_set.metadata.model_dump(mode="json"),
            },
            indent=2,
            default=str,
        )


class TailoringAggregator(BaseAggregator):
    """Merges tailoring-roster results into one rewritten document."""

    async def combine_tailoring(
        self,
        result_set: TailoringAgentResultSet,
        document: CandidateProfile,
        job: JobPosting,
        scoring_analysis: str | None = None,
        user_request: str | None = None,
        user_id: str | None = None,
    ) -> TailoringOrchestrationResult:
        """
        Merge tailoring recommendations.

        The merged document must be non-empty and no longer than
        max_tailored_document_chars; otherwise the original document is
        returned unchanged with a summary of which agents succeeded.
        """
        started = time.perf_counter()
        response = await self.executor.execute_guarded(
            TAILORING_ORCHESTRATION_TEMPLATE_ID,
            {
                "resume": document.resume,
                "job_description": job_description_text(job),
                "scoring_analysis": scoring_analysis or NO_SCORING_ANALYSIS,
                "agent_results": self.serialize_tailoring_results(result_set),
                "user_request": user_request or DEFAULT_USER_REQUEST,
            },
            ExecutionOptions(user_id=user_id, trace_metadata={"agent": "tailoring_orchestration", "job_id": job.id}),
        )
        elapsed = int((time.perf_counter() - started) * 1000)
        self._record(user_id, ActivityType.RESUME_TAILORING_ORCHESTRATION, job, response, elapsed)

        if not response.success:
            logger.warning(f"Tailoring orchestration failed, keeping original document: {response.error}")
            return self.tailoring_fallback(result_set, document, response.usage)

        final_document = response.data["final_tailored_resume"].strip()
        if len(final_document) > self.settings.max_tailored_document_chars:
            logger.warning(
                f"Tailored document too long ({len(final_document)} chars > "
                f"{self.settings.max_tailored_document_chars}); keeping original document"
            )
            return self.tailoring_fallback(result_set, document, response.usage)

        return TailoringOrchestrationResult(
            final_document=final_document,
            priority_changes=response.data.get("priority_changes") or [],
            change_summary=response.data.get("change_summary") or "",
            expected_score_improvements=response.data.get("expected_score_improvements") or [],
            conflicts_resolved=response.data.get("conflicts_resolved") or [],
            consistency_improvements=response.data.get("consistency_improvements") or [],
            readability_enhancements=response.data.get("readability_enhancements") or [],
            execution_summary=self._summary(result_set, TAILORING_VERSION, is_fallback=False),
            usage=response.usage,
        )

    def tailoring_fallback(
        self,
        result_set: TailoringAgentResultSet,
        document: CandidateProfile,
        usage: TokenUsage | None = None,
    ) -> TailoringOrchestrationResult:
        successful = [k.value for k in result_set.successful_kinds]
        failed = [k.value for k in result_set.failed_kinds]

        priority_changes = [f"{name} optimization completed successfully" for name in successful]
        if failed:
            priority_changes.append(f"Some optimizations failed: {', '.join(failed)}")

        outcome = f"Failed agents: {', '.join(failed)}" if failed else "All agents completed successfully."
        return TailoringOrchestrationResult(
            final_document=document.resume,
            priority_changes=priority_changes,
            change_summary=(
                f"Multi-agent tailoring completed with {len(successful)}/{len(result_set.results)} "
                f"agents successful. {outcome}"
            ),
            expected_score_improvements=[f"Improved {name} alignment with target role" for name in successful],
            conflicts_resolved=["Fallback orchestration used - no conflicts to resolve"],
            consistency_improvements=["Manual review recommended for consistency"],
            readability_enhancements=["Original resume readability maintained"],
            execution_summary=self._summary(result_set, TAILORING_FALLBACK_VERSION, is_fallback=True),
            usage=usage,
        )

    @staticmethod
    def serialize_tailoring_results(result_set: TailoringAgentResultSet) -> str:
        return json.dumps(
            {
                k.value: r.output if r.success else {"failed": True, "error": r.error}
                for k, r in result_set.results.items()
            },
            indent=2,
            default=str,
        )

    @staticmethod
    def _summary(result_set: TailoringAgentResultSet, version: str, is_fallback: bool) -> TailoringSummary:
        return TailoringSummary(
            agents_executed=result_set.metadata.agents_executed,
            successful_agents=[k.value for k in result_set.successful_kinds],
            failed_agents=[k.value for k in result_set.failed_kinds],
            total_execution_time_ms=result_set.metadata.total_execution_time_ms,
            tailoring_version=version,
            is_fallback=is_fallback,
        )
