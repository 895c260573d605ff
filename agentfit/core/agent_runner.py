"""
Agent Runner for AgentFit

Runs one roster agent and always hands back an AgentResult. A failed
call becomes a fallback result (conservative score, empty lists) so one
bad agent never aborts the pipeline. Only TemplateError escapes: it is
a programming error, not a runtime condition.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from agentfit.config.settings import Settings, get_settings
from agentfit.core.activity import ActivityLogger, ActivityType
from agentfit.core.cache import ResultCache
from agentfit.core.prompt_executor import ExecutionOptions, PromptExecutor, PromptResponse
from agentfit.models.agents import AgentKind, AgentResult, TailoringAgentKind
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.prompts.scoring import SCORING_TEMPLATE_IDS
from agentfit.prompts.tailoring import TAILORING_TEMPLATE_IDS

logger = logging.getLogger(__name__)

DEFAULT_USER_REQUEST = "Tailor the resume to maximize its match with this job."
NO_SCORING_ANALYSIS = "No scoring analysis available."


def job_description_text(job: JobPosting) -> str:
    header = f"{job.title} at {job.company}" if job.company else job.title
    if job.location:
        header += f" ({job.location})"
    return f"{header}\n\n{job.description}"


class AgentRunner:
    """Executes single agents with caching, activity recording and fallbacks."""

    def __init__(
        self,
        executor: PromptExecutor,
        settings: Settings | None = None,
        cache: ResultCache | None = None,
        activity: ActivityLogger | None = None,
    ):
        self.executor = executor
        self.settings = settings or get_settings()
        self.cache = cache
        self.activity = activity

    # =========================================================================
    # SCORING ROSTER
    # =========================================================================

    async def run(
        self,
        kind: AgentKind,
        candidate: CandidateProfile,
        job: JobPosting,
        user_id: str | None = None,
    ) -> AgentResult:
        """
        Run one scoring-roster agent.

        Args:
            kind: Agent to run
            candidate: Candidate document
            job: Job posting
            user_id: Caller identity; enables caching and activity records

        Returns:
            AgentResult (a fallback result when the call failed)
        """
        started = time.perf_counter()

        if user_id and self.cache:
            cached = await self.cache.get_agent_result(user_id, candidate.content_hash, job.id, kind)
            if cached is not None:
                logger.info(f"Agent {kind.value} served from cache")
                return AgentResult(
                    kind=kind,
                    output=cached,
                    executed_at=datetime.now(timezone.utc),
                    execution_time_ms=self._elapsed_ms(started),
                    success=True,
                    from_cache=True,
                )

        variables = {"job": job.to_prompt_json(), "resume": candidate.resume}
        options = ExecutionOptions(
            user_id=user_id,
            trace_metadata={"agent": kind.value, "job_id": job.id},
        )
        response = await self.executor.execute_guarded(SCORING_TEMPLATE_IDS[kind], variables, options)
        elapsed = self._elapsed_ms(started)

        if response.success:
            result = AgentResult(
                kind=kind,
                output=response.data,
                executed_at=datetime.now(timezone.utc),
                execution_time_ms=elapsed,
                success=True,
                usage=response.usage,
            )
            if user_id and self.cache:
                await self.cache.put_agent_result(user_id, candidate.content_hash, job.id, kind, result.output)
        else:
            logger.warning(f"Agent {kind.value} failed, using fallback: {response.error}")
            result = self.fallback_result(kind, response, elapsed)

        self._record(user_id, ActivityType.JOB_SCORING_AGENT, kind, job, result, response)
        return result

    # =========================================================================
    # TAILORING ROSTER
    # =========================================================================

    async def run_tailoring(
        self,
        kind: TailoringAgentKind,
        document: CandidateProfile,
        job: JobPosting,
        scoring_analysis: str | None = None,
        user_request: str | None = None,
        user_id: str | None = None,
    ) -> AgentResult:
        """Run one tailoring-roster agent. Failures yield an empty fallback output."""
        started = time.perf_counter()

        variables = {
            "resume": document.resume,
            "job_description": job_description_text(job),
            "scoring_analysis": scoring_analysis or NO_SCORING_ANALYSIS,
            "user_request": user_request or DEFAULT_USER_REQUEST,
        }
        options = ExecutionOptions(
            user_id=user_id,
            trace_metadata={"agent": kind.value, "job_id": job.id},
        )
        response = await self.executor.execute_guarded(TAILORING_TEMPLATE_IDS[kind], variables, options)
        elapsed = self._elapsed_ms(started)

        if response.success:
            result = AgentResult(
                kind=kind,
                output=response.data,
                executed_at=datetime.now(timezone.utc),
                execution_time_ms=elapsed,
                success=True,
                usage=response.usage,
            )
        else:
            logger.warning(f"Tailoring agent {kind.value} failed: {response.error}")
            result = self.fallback_result(kind, response, elapsed)

        self._record(user_id, ActivityType.RESUME_TAILORING_AGENT, kind, job, result, response)
        return result

    # =========================================================================
    # FALLBACKS
    # =========================================================================

    def _get_fallback_output(self, kind: AgentKind | TailoringAgentKind, reason: str) -> dict[str, Any]:
        """Output used in place of a failed agent's reply."""
        if isinstance(kind, TailoringAgentKind):
            return {}
        if kind == AgentKind.STRENGTHS:
            return {"top_strengths": [], "reasoning": reason, "differentiators": [], "role_relevance": ""}
        if kind == AgentKind.WEAKNESSES:
            return {"top_weaknesses": [], "reasoning": reason, "risk_assessment": "", "prioritization": ""}
        return {
            "category_score": self.settings.fallback_score_for(kind.value),
            "reasoning": reason,
            "recommendations": [],
        }

    def fallback_result(
        self,
        kind: AgentKind | TailoringAgentKind,
        response: PromptResponse,
        execution_time_ms: int,
    ) -> AgentResult:
        label = kind.value.replace("_", " ")
        if response.timed_out:
            reason = f"{label} assessment timed out - using conservative score"
        else:
            reason = f"{label} evaluation failed: {response.error}"
        return AgentResult(
            kind=kind,
            output=self._get_fallback_output(kind, reason),
            executed_at=datetime.now(timezone.utc),
            execution_time_ms=execution_time_ms,
            success=False,
            is_fallback=True,
            error=response.error,
            usage=response.usage,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _record(
        self,
        user_id: str | None,
        activity_type: str,
        kind: AgentKind | TailoringAgentKind,
        job: JobPosting,
        result: AgentResult,
        response: PromptResponse,
    ) -> None:
        if not (user_id and self.activity):
            return
        self.activity.record(
            user_id=user_id,
            activity_type=activity_type,
            usage=result.usage,
            execution_time_ms=result.execution_time_ms,
            metadata={
                "agent_type": kind.value,
                "model": response.metadata.get("model"),
                "job_id": job.id,
                "job_title": job.title,
                "company": job.company,
                "success": result.success,
            },
        )

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)
