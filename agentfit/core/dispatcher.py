"""
Parallel Dispatcher for AgentFit

Fans a roster out concurrently and waits for every agent. Agents never
raise (the runner converts failures into fallbacks), so the join always
yields exactly one result per roster slot.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from agentfit.core.agent_runner import AgentRunner
from agentfit.models.agents import (
    ANALYSIS_KINDS,
    SCORING_KINDS,
    AgentResultSet,
    ExecutionMetadata,
    TailoringAgentKind,
    TailoringAgentResultSet,
)
from agentfit.models.profile import CandidateProfile, JobPosting

logger = logging.getLogger(__name__)


class ParallelDispatcher:
    """Runs the scoring and tailoring rosters with asyncio.gather."""

    def __init__(self, runner: AgentRunner):
        self.runner = runner

    async def run_roster(
        self,
        candidate: CandidateProfile,
        job: JobPosting,
        user_id: str | None = None,
    ) -> AgentResultSet:
        """Run all eight scoring-roster agents concurrently."""
        kinds = [*SCORING_KINDS, *ANALYSIS_KINDS]
        logger.info(f"Dispatching {len(kinds)} scoring agents for job {job.id}")
        started = time.perf_counter()

        results = await asyncio.gather(
            *(self.runner.run(kind, candidate, job, user_id) for kind in kinds)
        )
        by_kind = dict(zip(kinds, results))

        metadata = ExecutionMetadata(
            total_execution_time_ms=int((time.perf_counter() - started) * 1000),
            agents_executed=len(results),
            timestamp=datetime.now(timezone.utc),
        )
        result_set = AgentResultSet(
            scoring={kind: by_kind[kind] for kind in SCORING_KINDS},
            analysis={kind: by_kind[kind] for kind in ANALYSIS_KINDS},
            metadata=metadata,
        )

        if result_set.has_fallback:
            logger.warning(
                f"Scoring roster finished with fallbacks: "
                f"{', '.join(k.value for k in result_set.fallback_kinds)}"
            )
        logger.info(f"Scoring roster completed in {metadata.total_execution_time_ms}ms")
        return result_set

    async def run_tailoring_roster(
        self,
        document: CandidateProfile,
        job: JobPosting,
        scoring_analysis: str | None = None,
        user_request: str | None = None,
        user_id: str | None = None,
    ) -> TailoringAgentResultSet:
        """Run all eight tailoring-roster agents concurrently."""
        kinds = list(TailoringAgentKind)
        logger.info(f"Dispatching {len(kinds)} tailoring agents for job {job.id}")
        started = time.perf_counter()

        results = await asyncio.gather(
            *(
                self.runner.run_tailoring(kind, document, job, scoring_analysis, user_request, user_id)
                for kind in kinds
            )
        )

        result_set = TailoringAgentResultSet(
            results=dict(zip(kinds, results)),
            metadata=ExecutionMetadata(
                total_execution_time_ms=int((time.perf_counter() - started) * 1000),
                agents_executed=len(results),
                timestamp=datetime.now(timezone.utc),
            ),
        )
        logger.info(
            f"Tailoring roster completed: {len(result_set.successful_kinds)}/{len(kinds)} succeeded "
            f"in {result_set.metadata.total_execution_time_ms}ms"
        )
        return result_set
