"""
Scoring API endpoints

Handles:
- Scoring a candidate against one job
- Batch scoring against several jobs
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from agentfit.api.dependencies import get_engine, get_user_id
from agentfit.core.engine import MatchEngine
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.models.scoring import ScoreReport

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class ScoreRequest(BaseModel):
    """Request model for scoring. Omit resume to use the cached default profile."""
    resume: str | None = None
    job: JobPosting
    use_cache: bool = True


class BatchScoreRequest(BaseModel):
    """Request model for batch scoring."""
    resume: str | None = None
    jobs: list[JobPosting] = Field(..., min_length=1, max_length=50)


class BatchScoreSummary(BaseModel):
    """Condensed per-job entry in a batch response."""
    job_id: str
    overall_score: int
    category: str
    hiring_recommendation: str
    from_cache: bool
    is_fallback: bool


class BatchScoreResponse(BaseModel):
    """Response model for batch scoring."""
    results: list[BatchScoreSummary]
    total_tokens: int
    estimated_cost: float


# ============================================================================
# ENDPOINTS
# ============================================================================

async def _resolve_candidate(engine: MatchEngine, resume: str | None, user_id: str | None) -> CandidateProfile:
    if resume and resume.strip():
        return CandidateProfile(resume=resume)
    if user_id and engine.cache:
        profile = await engine.cache.get_default_profile(user_id)
        if profile:
            return profile
    raise HTTPException(status_code=400, detail="No resume provided and no default profile cached")


@router.post("", response_model=ScoreReport)
async def score_job(
    request: ScoreRequest,
    engine: MatchEngine = Depends(get_engine),
    user_id: str | None = Depends(get_user_id),
) -> ScoreReport:
    """
    Score a candidate against one job with the multi-agent roster.

    Always returns a complete verdict; degraded agents are flagged in the breakdown.
    """
    candidate = await _resolve_candidate(engine, request.resume, user_id)
    return await engine.score_candidate_against_job(candidate, request.job, user_id, use_cache=request.use_cache)


@router.post("/batch", response_model=BatchScoreResponse)
async def score_jobs(
    request: BatchScoreRequest,
    engine: MatchEngine = Depends(get_engine),
    user_id: str | None = Depends(get_user_id),
) -> BatchScoreResponse:
    """Score a candidate against several jobs with bounded concurrency."""
    ids = [job.id for job in request.jobs]
    if len(set(ids)) != len(ids):
        raise HTTPException(status_code=400, detail="Duplicate job ids in batch")

    candidate = await _resolve_candidate(engine, request.resume, user_id)
    reports = await engine.score_candidate_against_jobs(candidate, request.jobs, user_id)

    return BatchScoreResponse(
        results=[
            BatchScoreSummary(
                job_id=report.job_id,
                overall_score=report.result.overall_score,
                category=report.result.category.value,
                hiring_recommendation=report.result.hiring_recommendation,
                from_cache=report.from_cache,
                is_fallback=report.has_fallback,
            )
            for report in reports
        ],
        total_tokens=sum(r.usage.total_tokens for r in reports),
        estimated_cost=sum(r.usage.estimated_cost for r in reports),
    )
