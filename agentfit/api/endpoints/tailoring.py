"""
Tailoring API endpoints

Handles:
- Multi-agent document tailoring for a job
- Single-prompt document edits
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from agentfit.api.dependencies import get_engine, get_user_id
from agentfit.core.engine import MatchEngine
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.models.tailoring import EditMode, EditResult

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class TailorRequest(BaseModel):
    """Request model for tailoring."""
    resume: str = Field(..., min_length=1)
    job: JobPosting
    scoring_analysis: str | dict[str, Any] | None = None
    user_request: str | None = None
    use_cache: bool = True


class TailorResponse(BaseModel):
    """Response model for tailoring."""
    job_id: str
    tailored_document: str
    priority_changes: list[str]
    change_summary: str
    expected_score_improvements: list[str]
    successful_agents: list[str]
    failed_agents: list[str]
    is_fallback: bool
    from_cache: bool
    total_tokens: int
    estimated_cost: float
    processing_time_ms: int


class EditRequest(BaseModel):
    """Request model for a single-prompt edit."""
    resume: str = Field(..., min_length=1)
    user_request: str = Field(..., min_length=1)
    mode: EditMode = EditMode.AGENT


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("", response_model=TailorResponse)
async def tailor_document(
    request: TailorRequest,
    engine: MatchEngine = Depends(get_engine),
    user_id: str | None = Depends(get_user_id),
) -> TailorResponse:
    """
    Tailor a document for a job with the tailoring roster.

    When tailoring degrades the original document is returned unchanged.
    """
    analysis = request.scoring_analysis
    if isinstance(analysis, dict):
        analysis = json.dumps(analysis, indent=2)

    report = await engine.tailor_document_for_job(
        CandidateProfile(resume=request.resume),
        request.job,
        scoring_analysis=analysis,
        user_request=request.user_request,
        user_id=user_id,
        use_cache=request.use_cache,
    )
    result = report.result

    return TailorResponse(
        job_id=report.job_id,
        tailored_document=result.final_document,
        priority_changes=result.priority_changes,
        change_summary=result.change_summary,
        expected_score_improvements=result.expected_score_improvements,
        successful_agents=result.execution_summary.successful_agents,
        failed_agents=result.execution_summary.failed_agents,
        is_fallback=result.is_fallback,
        from_cache=report.from_cache,
        total_tokens=report.usage.total_tokens,
        estimated_cost=report.usage.estimated_cost,
        processing_time_ms=report.total_processing_time_ms,
    )


@router.post("/edit", response_model=EditResult)
async def edit_document(
    request: EditRequest,
    engine: MatchEngine = Depends(get_engine),
    user_id: str | None = Depends(get_user_id),
) -> EditResult:
    """Apply an edit request, or answer it with advice in ask mode."""
    result = await engine.edit_document(
        CandidateProfile(resume=request.resume),
        request.user_request,
        mode=request.mode,
        user_id=user_id,
    )
    if not result.success:
        raise HTTPException(status_code=502, detail=f"Edit failed: {result.error}")
    return result
