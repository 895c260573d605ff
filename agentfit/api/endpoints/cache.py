"""
Cache API endpoints

Handles:
- Cache statistics and expired-entry cleanup
- The caller's current job and default profile
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from agentfit.api.dependencies import get_engine, require_user_id
from agentfit.core.cache import ResultCache
from agentfit.core.engine import MatchEngine
from agentfit.models.cache import CacheStats
from agentfit.models.profile import CandidateProfile, JobPosting

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class DefaultProfileRequest(BaseModel):
    """Request model for storing the default profile."""
    resume: str = Field(..., min_length=1)
    name: str | None = None


class CacheWriteResponse(BaseModel):
    """Response model for cache writes."""
    key: str


class CleanupResponse(BaseModel):
    """Response model for expired-entry cleanup."""
    deleted: int


def _cache(engine: MatchEngine) -> ResultCache:
    if engine.cache is None:
        raise HTTPException(status_code=503, detail="Cache is not configured")
    return engine.cache


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/stats", response_model=CacheStats)
async def get_stats(
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> CacheStats:
    """Entry counts and hit totals for the caller."""
    return await _cache(engine).stats(user_id)


@router.delete("/expired", response_model=CleanupResponse)
async def cleanup_expired(engine: MatchEngine = Depends(get_engine)) -> CleanupResponse:
    """Delete every expired entry."""
    return CleanupResponse(deleted=await _cache(engine).cleanup_expired())


@router.put("/current-job", response_model=CacheWriteResponse)
async def set_current_job(
    job: JobPosting,
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> CacheWriteResponse:
    """Replace the caller's current job."""
    key = await _cache(engine).set_current_job(user_id, job)
    if key is None:
        raise HTTPException(status_code=500, detail="Failed to store current job")
    return CacheWriteResponse(key=key)


@router.get("/current-job", response_model=JobPosting)
async def get_current_job(
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> JobPosting:
    job = await _cache(engine).get_current_job(user_id)
    if job is None:
        raise HTTPException(status_code=404, detail="No current job")
    return job


@router.put("/default-profile", response_model=CacheWriteResponse)
async def set_default_profile(
    request: DefaultProfileRequest,
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> CacheWriteResponse:
    """Store the profile used when a scoring request omits the resume."""
    profile = CandidateProfile(resume=request.resume, name=request.name)
    key = await _cache(engine).set_default_profile(user_id, profile)
    if key is None:
        raise HTTPException(status_code=500, detail="Failed to store default profile")
    return CacheWriteResponse(key=key)


@router.get("/default-profile", response_model=CandidateProfile)
async def get_default_profile(
    engine: MatchEngine = Depends(get_engine),
    user_id: str = Depends(require_user_id),
) -> CandidateProfile:
    profile = await _cache(engine).get_default_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="No default profile")
    return profile
