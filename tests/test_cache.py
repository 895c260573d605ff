"""
Tests for the result cache and its stores.
"""

from datetime import datetime, timedelta, timezone

import pytest

from agentfit.core.cache import (
    CacheStore,
    FileCacheStore,
    InMemoryCacheStore,
    ResultCache,
    build_cache_key,
    sanitize_cache_key,
)
from agentfit.models.agents import AgentKind
from agentfit.models.cache import CacheKind
from agentfit.models.profile import CandidateProfile, JobPosting, content_hash


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class BrokenStore(CacheStore):
    async def get(self, key):
        raise OSError("disk gone")

    async def set(self, entry):
        raise OSError("disk gone")

    async def delete(self, key):
        raise OSError("disk gone")

    async def query(self, user_id=None, kind=None):
        raise OSError("disk gone")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def result_cache(settings, clock) -> ResultCache:
    return ResultCache(InMemoryCacheStore(), settings, clock=clock)


def test_content_hash_is_truncated_sha256():
    digest = content_hash("resume text")
    assert len(digest) == 16
    assert digest == content_hash("resume text")
    assert digest != content_hash("resume text!")


def test_sanitize_cache_key():
    assert sanitize_cache_key("scoring_result:user@x.com:abc/def") == "scoring_result_user_x_com_abc_def"
    assert sanitize_cache_key("__a::b__") == "a_b"


def test_build_cache_key_includes_extra_parts():
    key = build_cache_key(CacheKind.AGENT_RESULT, "u1", "abc", "job-1", "education")
    assert key.startswith("agent_result_u1_abc_job-1_education_")
    assert key == build_cache_key(CacheKind.AGENT_RESULT, "u1", "abc", "job-1", "education")


def test_build_cache_key_keeps_lookalike_ids_apart():
    assert sanitize_cache_key("a@b.com") == sanitize_cache_key("a.b@com")
    assert build_cache_key(CacheKind.SCORING_RESULT, "a@b.com", "h1") != build_cache_key(
        CacheKind.SCORING_RESULT, "a.b@com", "h1"
    )
    assert build_cache_key(CacheKind.SCORING_RESULT, "u1", "h1", "job.1") != build_cache_key(
        CacheKind.SCORING_RESULT, "u1", "h1", "job_1"
    )


@pytest.mark.asyncio
async def test_put_then_get_counts_hits(result_cache):
    await result_cache.put("u1", CacheKind.SCORING_RESULT, "h1", {"score": 70}, extra=("job-1",))

    assert await result_cache.get("u1", CacheKind.SCORING_RESULT, "h1", extra=("job-1",)) == {"score": 70}
    await result_cache.get("u1", CacheKind.SCORING_RESULT, "h1", extra=("job-1",))

    stats = await result_cache.stats("u1")
    assert stats.total_entries == 1
    assert stats.total_hits == 2
    assert stats.by_kind == {"scoring_result": 1}


@pytest.mark.asyncio
async def test_entries_are_per_user(result_cache):
    await result_cache.put("u1", CacheKind.SCORING_RESULT, "h1", {"score": 70})
    assert await result_cache.get("u2", CacheKind.SCORING_RESULT, "h1") is None


@pytest.mark.asyncio
async def test_lookalike_user_ids_do_not_share_entries(result_cache):
    await result_cache.put("a@b.com", CacheKind.SCORING_RESULT, "h1", {"owner": "a@b.com"})

    assert await result_cache.get("a.b@com", CacheKind.SCORING_RESULT, "h1") is None
    assert await result_cache.get("a@b.com", CacheKind.SCORING_RESULT, "h1") == {"owner": "a@b.com"}


@pytest.mark.asyncio
async def test_expired_entry_is_deleted_on_read(result_cache, clock):
    await result_cache.put("u1", CacheKind.SCORING_RESULT, "h1", {"score": 70})
    clock.advance(days=1, seconds=1)

    assert await result_cache.get("u1", CacheKind.SCORING_RESULT, "h1") is None
    assert (await result_cache.stats("u1")).total_entries == 0


@pytest.mark.asyncio
async def test_retention_differs_per_kind(result_cache, clock):
    profile = CandidateProfile(resume="Python developer")
    await result_cache.set_default_profile("u1", profile)
    await result_cache.put("u1", CacheKind.AGENT_RESULT, "h1", {"x": 1})
    clock.advance(days=7)

    assert await result_cache.get("u1", CacheKind.AGENT_RESULT, "h1") is None
    assert await result_cache.get_default_profile("u1") == profile


@pytest.mark.asyncio
async def test_cleanup_expired(result_cache, clock):
    await result_cache.put("u1", CacheKind.AGENT_RESULT, "h1", {"x": 1})
    await result_cache.put("u1", CacheKind.JOB_CURRENT, "job-1", {"x": 2})
    clock.advance(days=2)

    assert await result_cache.cleanup_expired() == 1
    assert (await result_cache.stats()).by_kind == {"job_current": 1}


@pytest.mark.asyncio
async def test_current_job_is_replaced(result_cache, clock):
    first = JobPosting(id="job-1", title="DE", description="Spark")
    second = JobPosting(id="job-2", title="MLE", description="PyTorch")

    await result_cache.set_current_job("u1", first)
    clock.advance(minutes=5)
    await result_cache.set_current_job("u1", second)

    assert await result_cache.get_current_job("u1") == second
    assert (await result_cache.stats("u1")).by_kind == {"job_current": 1}


@pytest.mark.asyncio
async def test_typed_agent_helpers(result_cache):
    await result_cache.put_agent_result("u1", "h1", "job-1", AgentKind.EDUCATION, {"category_score": 80})

    assert await result_cache.get_agent_result("u1", "h1", "job-1", AgentKind.EDUCATION) == {"category_score": 80}
    assert await result_cache.get_agent_result("u1", "h1", "job-1", AgentKind.SOFT_SKILLS) is None
    assert await result_cache.get_agent_result("u1", "h1", "job-2", AgentKind.EDUCATION) is None


@pytest.mark.asyncio
async def test_store_failures_degrade_to_misses(settings):
    cache = ResultCache(BrokenStore(), settings)

    assert await cache.put("u1", CacheKind.SCORING_RESULT, "h1", {"x": 1}) is None
    assert await cache.get("u1", CacheKind.SCORING_RESULT, "h1") is None
    assert await cache.get_default_profile("u1") is None
    assert (await cache.stats()).total_entries == 0
    assert await cache.cleanup_expired() == 0


@pytest.mark.asyncio
async def test_file_store_round_trip(tmp_path, settings, clock):
    cache = ResultCache(FileCacheStore(tmp_path / "cache"), settings, clock=clock)
    key = await cache.put_processing_result("u1", "h1", "tailoring", "job-1", {"final": "doc"})

    assert (tmp_path / "cache" / f"{key}.json").exists()
    assert await cache.get_processing_result("u1", "h1", "tailoring", "job-1") == {"final": "doc"}

    reopened = ResultCache(FileCacheStore(tmp_path / "cache"), settings, clock=clock)
    stats = await reopened.stats("u1")
    assert stats.total_entries == 1
    assert stats.total_hits == 1
