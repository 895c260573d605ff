"""
Match Engine for AgentFit

Entry points for scoring a candidate against jobs, tailoring a
document for a job and single-prompt document edits. Components are
injected; from_settings() wires the default set.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

import httpx

from agentfit.config.settings import Settings, get_settings
from agentfit.core.activity import ActivityLogger, ActivityType
from agentfit.core.agent_runner import AgentRunner
from agentfit.core.aggregator import OrchestrationAggregator, TailoringAggregator
from agentfit.core.cache import FileCacheStore, InMemoryCacheStore, ResultCache
from agentfit.core.completion_client import CompletionClient
from agentfit.core.dispatcher import ParallelDispatcher
from agentfit.core.prompt_executor import ExecutionOptions, PromptExecutor
from agentfit.core.usage import aggregate_usage
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.models.scoring import OrchestrationResult, ScoreReport
from agentfit.models.tailoring import EditMode, EditResult, TailoringReport
from agentfit.prompts import EDITING_TEMPLATE_IDS, build_template_table

logger = logging.getLogger(__name__)

TAILORING_OPERATION = "tailoring"


class MatchEngine:
    """
    Multi-agent scoring and tailoring engine.

    Scoring flow:
    1. Eight roster agents run concurrently (fallbacks on failure)
    2. One orchestration call combines them (local combination on failure)
    3. Usage is rolled up across all calls
    """

    def __init__(
        self,
        executor: PromptExecutor,
        cache: ResultCache | None = None,
        activity: ActivityLogger | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.executor = executor
        self.cache = cache
        self.activity = activity
        self.runner = AgentRunner(executor, self.settings, cache, activity)
        self.dispatcher = ParallelDispatcher(self.runner)
        self.aggregator = OrchestrationAggregator(executor, self.settings, activity)
        self.tailoring_aggregator = TailoringAggregator(executor, self.settings, activity)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MatchEngine":
        """Wire the default components from settings."""
        settings = settings or get_settings()
        client = CompletionClient(settings, transport=transport)
        executor = PromptExecutor(client, build_template_table(settings), settings)
        store = FileCacheStore(settings.cache_dir) if settings.cache_dir else InMemoryCacheStore()
        return cls(
            executor=executor,
            cache=ResultCache(store, settings),
            activity=ActivityLogger(settings.activity_log_capacity),
            settings=settings,
        )

    async def close(self):
        """Release the HTTP client."""
        await self.executor.client.close()

    # =========================================================================
    # SCORING
    # =========================================================================

    async def score_candidate_against_job(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
        user_id: str | None = None,
        use_cache: bool = True,
    ) -> ScoreReport:
        """
        Score one candidate against one job.

        Args:
            candidate: Candidate document
            job: Job posting
            user_id: Caller identity; enables caching and activity records
            use_cache: Read a cached report when one exists

        Returns:
            ScoreReport. Only reports without any fallback are cached.
        """
        started = time.perf_counter()
        caching = bool(user_id and self.cache)

        if caching and use_cache:
            cached = await self.cache.get_scoring_result(user_id, candidate.content_hash, job.id)
            if cached is not None:
                logger.info(f"Scoring result for job {job.id} served from cache")
                return ScoreReport.model_validate(cached).model_copy(update={"from_cache": True})

        logger.info(f"Scoring candidate against job {job.id} ({job.title})")
        result_set = await self.dispatcher.run_roster(candidate, job, user_id)
        result = await self.aggregator.combine(result_set, candidate, job, user_id)

        report = ScoreReport(
            job_id=job.id,
            result=result,
            usage=aggregate_usage(result_set.all_results(), result.usage),
            agent_results=result_set,
            processed_at=datetime.now(timezone.utc),
            total_processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
        logger.info(
            f"Job {job.id} scored {result.overall_score} ({result.category.value}) | "
            f"tokens={report.usage.total_tokens} | cost=${report.usage.estimated_cost:.4f} | "
            f"{report.total_processing_time_ms}ms"
        )

        if caching:
            if report.has_fallback:
                logger.info(f"Not caching scoring result for job {job.id}: fallback used")
            else:
                await self.cache.put_scoring_result(
                    user_id, candidate.content_hash, job.id, report.model_dump(mode="json")
                )
        return report

    async def score_candidate_against_jobs(
        self,
        candidate: CandidateProfile,
        jobs: list[JobPosting],
        user_id: str | None = None,
    ) -> list[ScoreReport]:
        """Score one candidate against several jobs, at most max_concurrent_jobs at a time."""
        semaphore = asyncio.Semaphore(max(1, self.settings.max_concurrent_jobs))

        async def score(job: JobPosting) -> ScoreReport:
            async with semaphore:
                return await self.score_candidate_against_job(candidate, job, user_id)

        return list(await asyncio.gather(*(score(job) for job in jobs)))

    # =========================================================================
    # TAILORING
    # =========================================================================

    async def tailor_document_for_job(
        self,
        document: CandidateProfile,
        job: JobPosting,
        scoring_analysis: OrchestrationResult | str | None = None,
        user_request: str | None = None,
        user_id: str | None = None,
        use_cache: bool = True,
    ) -> TailoringReport:
        """
        Rewrite a candidate document for a job with the tailoring roster.

        Args:
            document: Document to tailor
            job: Target job
            scoring_analysis: A prior verdict (or its JSON) to steer the rewrite
            user_request: Free-form instructions from the user

        Returns:
            TailoringReport. Fallback results keep the original document.
        """
        started = time.perf_counter()
        analysis_text = self._analysis_text(scoring_analysis)
        caching = bool(user_id and self.cache)

        if caching and use_cache:
            cached = await self.cache.get_processing_result(
                user_id, document.content_hash, TAILORING_OPERATION, job.id
            )
            if cached is not None:
                logger.info(f"Tailoring result for job {job.id} served from cache")
                return TailoringReport.model_validate(cached).model_copy(update={"from_cache": True})

        result_set = await self.dispatcher.run_tailoring_roster(
            document, job, analysis_text, user_request, user_id
        )
        result = await self.tailoring_aggregator.combine_tailoring(
            result_set, document, job, analysis_text, user_request, user_id
        )

        report = TailoringReport(
            job_id=job.id,
            result=result,
            usage=aggregate_usage(result_set.all_results(), result.usage),
            agent_results=result_set,
            processed_at=datetime.now(timezone.utc),
            total_processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
        logger.info(
            f"Tailored document for job {job.id} | success rate {result_set.success_rate}% | "
            f"fallback={result.is_fallback} | {report.total_processing_time_ms}ms"
        )

        if caching and not result.is_fallback:
            await self.cache.put_processing_result(
                user_id, document.content_hash, TAILORING_OPERATION, job.id, report.model_dump(mode="json")
            )
        return report

    # =========================================================================
    # EDITING
    # =========================================================================

    async def edit_document(
        self,
        document: CandidateProfile,
        user_request: str,
        mode: EditMode = EditMode.AGENT,
        user_id: str | None = None,
    ) -> EditResult:
        """Apply a free-form edit request (agent/proofread) or answer it with advice (ask)."""
        started = time.perf_counter()
        response = await self.executor.execute(
            EDITING_TEMPLATE_IDS[mode],
            {"resume": document.resume, "user_request": user_request},
            ExecutionOptions(user_id=user_id, trace_metadata={"edit_mode": mode.value}),
        )
        elapsed = int((time.perf_counter() - started) * 1000)

        if user_id and self.activity:
            self.activity.record(
                user_id=user_id,
                activity_type=ActivityType.RESUME_EDIT,
                usage=response.usage,
                execution_time_ms=elapsed,
                metadata={"edit_mode": mode.value, "model": response.metadata.get("model"), "success": response.success},
            )

        if not response.success:
            logger.warning(f"Document edit ({mode.value}) failed: {response.error}")
            return EditResult(mode=mode, success=False, error=response.error, usage=response.usage)

        if mode == EditMode.ASK:
            return EditResult(mode=mode, success=True, advice=response.data, usage=response.usage)

        return EditResult(
            mode=mode,
            success=True,
            updated_document=response.data["updated_document"],
            change_summary=response.data.get("change_summary") or None,
            usage=response.usage,
        )

    @staticmethod
    def _analysis_text(scoring_analysis: OrchestrationResult | str | None) -> str | None:
        if isinstance(scoring_analysis, OrchestrationResult):
            return scoring_analysis.model_dump_json(exclude={"usage"}, indent=2)
        return scoring_analysis or None
