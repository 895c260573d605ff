"""
Result Cache for AgentFit

Content-addressed, TTL-bound storage of expensive results: default
profiles, the current job, full scoring reports, individual agent
outputs and tailoring results.

Entry ids are "{kind}:{user_id}:{content_hash}[:extra...]", sanitized
and suffixed with a digest of the raw parts, so identical content
uploaded by two users occupies two entries. Every read checks expiry
first (expired entries are deleted lazily) and then bumps the hit
counter. A failing store never fails the caller: reads
degrade to a miss and writes to a logged no-op.
"""

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Sequence

from agentfit.config.settings import Settings, get_settings
from agentfit.models.agents import AgentKind
from agentfit.models.cache import CacheEntry, CacheKind, CacheStats, CacheUsage
from agentfit.models.profile import CandidateProfile, JobPosting
from agentfit.models.profile import content_hash as hash_content

logger = logging.getLogger(__name__)


def sanitize_cache_key(key: str) -> str:
    """Reduce a key to [A-Za-z0-9_-], collapsing and trimming underscores."""
    sanitized = re.sub(r"[/\\]", "_", key)
    sanitized = re.sub(r"[^a-zA-Z0-9_-]", "_", sanitized)
    sanitized = re.sub(r"_+", "_", sanitized)
    return sanitized.strip("_")


def build_cache_key(kind: CacheKind, user_id: str, content_hash: str, *extra: str) -> str:
    """
    Sanitized readable prefix plus a digest of the raw parts.

    Sanitizing is lossy ("a@b.com" and "a.b@com" both become "a_b_com");
    the digest is not.
    """
    parts = [kind.value, user_id, content_hash, *extra]
    readable = sanitize_cache_key(":".join(parts))
    return f"{readable}_{hash_content(json.dumps(parts))}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# STORES
# ============================================================================

class CacheStore(ABC):
    """Key-value backend for cache entries."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        ...

    @abstractmethod
    async def set(self, entry: CacheEntry) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def query(self, user_id: str | None = None, kind: CacheKind | None = None) -> list[CacheEntry]:
        """All entries matching the filters, expired ones included."""
        ...


class InMemoryCacheStore(CacheStore):
    """Process-local store. Entries are kept serialized so callers never share payload objects."""

    def __init__(self):
        self._entries: dict[str, str] = {}

    async def get(self, key: str) -> CacheEntry | None:
        raw = self._entries.get(key)
        return CacheEntry.model_validate_json(raw) if raw is not None else None

    async def set(self, entry: CacheEntry) -> None:
        self._entries[entry.id] = entry.model_dump_json()

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def query(self, user_id: str | None = None, kind: CacheKind | None = None) -> list[CacheEntry]:
        entries = [CacheEntry.model_validate_json(raw) for raw in list(self._entries.values())]
        return [
            e for e in entries
            if (user_id is None or e.user_id == user_id) and (kind is None or e.kind == kind)
        ]

    def __len__(self) -> int:
        return len(self._entries)


class FileCacheStore(CacheStore):
    """One JSON document per entry in a directory. Writes replace files atomically."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{sanitize_cache_key(key)}.json"

    async def get(self, key: str) -> CacheEntry | None:
        return await asyncio.to_thread(self._read, self._path(key))

    async def set(self, entry: CacheEntry) -> None:
        await asyncio.to_thread(self._write, self._path(entry.id), entry.model_dump_json())

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, True)

    async def query(self, user_id: str | None = None, kind: CacheKind | None = None) -> list[CacheEntry]:
        return await asyncio.to_thread(self._scan, user_id, kind)

    @staticmethod
    def _read(path: Path) -> CacheEntry | None:
        if not path.exists():
            return None
        return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))

    @staticmethod
    def _write(path: Path, data: str) -> None:
        tmp = path.with_suffix(".tmp")
        tmp.write_text(data, encoding="utf-8")
        os.replace(tmp, path)

    def _scan(self, user_id: str | None, kind: CacheKind | None) -> list[CacheEntry]:
        entries = []
        for path in sorted(self.directory.glob("*.json")):
            entry = self._read(path)
            if entry is None:
                continue
            if user_id is not None and entry.user_id != user_id:
                continue
            if kind is not None and entry.kind != kind:
                continue
            entries.append(entry)
        return entries


# ============================================================================
# RESULT CACHE
# ============================================================================

class ResultCache:
    """
    Typed cache facade over a CacheStore.

    Retention per kind comes from settings (resume_default 30 days,
    job_current and resume_processing 7 days, scoring_result and
    agent_result 1 day).
    """

    def __init__(
        self,
        store: CacheStore | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store or InMemoryCacheStore()
        self.settings = settings or get_settings()
        self.clock = clock or utc_now

    def ttl_for(self, kind: CacheKind) -> timedelta:
        return timedelta(days=self.settings.cache_ttl_days(kind.value))

    # =========================================================================
    # GENERIC OPERATIONS
    # =========================================================================

    async def get(
        self,
        user_id: str,
        kind: CacheKind,
        content_hash: str,
        extra: Sequence[str] = (),
    ) -> Any | None:
        """Return the cached payload, or None on miss, expiry or store failure."""
        key = build_cache_key(kind, user_id, content_hash, *extra)
        try:
            entry = await self.store.get(key)
            if entry is None:
                return None
            return await self._touch(entry)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    async def put(
        self,
        user_id: str,
        kind: CacheKind,
        content_hash: str,
        payload: Any,
        ttl: timedelta | None = None,
        extra: Sequence[str] = (),
    ) -> str | None:
        """Store a payload. Returns the entry id, or None when the store failed."""
        key = build_cache_key(kind, user_id, content_hash, *extra)
        now = self.clock()
        entry = CacheEntry(
            id=key,
            user_id=user_id,
            kind=kind,
            payload=payload,
            created_at=now,
            expires_at=now + (ttl or self.ttl_for(kind)),
            usage=CacheUsage(hits=0, last_accessed=now),
        )
        try:
            await self.store.set(entry)
            return key
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return None

    async def delete(self, user_id: str, kind: CacheKind, content_hash: str, extra: Sequence[str] = ()) -> None:
        key = build_cache_key(kind, user_id, content_hash, *extra)
        try:
            await self.store.delete(key)
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {e}")

    async def _touch(self, entry: CacheEntry) -> Any | None:
        now = self.clock()
        if entry.is_expired(now):
            await self.store.delete(entry.id)
            return None
        entry.usage = CacheUsage(hits=entry.usage.hits + 1, last_accessed=now)
        await self.store.set(entry)
        return entry.payload

    async def _latest(self, user_id: str, kind: CacheKind) -> Any | None:
        try:
            entries = await self.store.query(user_id=user_id, kind=kind)
            now = self.clock()
            live = []
            for entry in entries:
                if entry.is_expired(now):
                    await self.store.delete(entry.id)
                else:
                    live.append(entry)
            if not live:
                return None
            latest = max(live, key=lambda e: e.created_at)
            return await self._touch(latest)
        except Exception as e:
            logger.warning(f"Cache lookup failed for {kind.value}/{user_id}: {e}")
            return None

    # =========================================================================
    # TYPED HELPERS
    # =========================================================================

    async def set_default_profile(self, user_id: str, profile: CandidateProfile) -> str | None:
        return await self.put(user_id, CacheKind.RESUME_DEFAULT, profile.content_hash, profile.model_dump(mode="json"))

    async def get_default_profile(self, user_id: str) -> CandidateProfile | None:
        payload = await self._latest(user_id, CacheKind.RESUME_DEFAULT)
        return CandidateProfile.model_validate(payload) if payload is not None else None

    async def set_current_job(self, user_id: str, job: JobPosting) -> str | None:
        """Make job the single current job for the user, dropping every previous one."""
        try:
            for entry in await self.store.query(user_id=user_id, kind=CacheKind.JOB_CURRENT):
                await self.store.delete(entry.id)
        except Exception as e:
            logger.warning(f"Failed to clear current job for {user_id}: {e}")
        return await self.put(user_id, CacheKind.JOB_CURRENT, job.id, job.model_dump(mode="json"))

    async def get_current_job(self, user_id: str) -> JobPosting | None:
        payload = await self._latest(user_id, CacheKind.JOB_CURRENT)
        return JobPosting.model_validate(payload) if payload is not None else None

    async def get_scoring_result(self, user_id: str, resume_hash: str, job_id: str) -> dict | None:
        return await self.get(user_id, CacheKind.SCORING_RESULT, resume_hash, extra=(job_id,))

    async def put_scoring_result(self, user_id: str, resume_hash: str, job_id: str, payload: dict) -> str | None:
        return await self.put(user_id, CacheKind.SCORING_RESULT, resume_hash, payload, extra=(job_id,))

    async def get_agent_result(self, user_id: str, resume_hash: str, job_id: str, kind: AgentKind) -> dict | None:
        return await self.get(user_id, CacheKind.AGENT_RESULT, resume_hash, extra=(job_id, kind.value))

    async def put_agent_result(
        self, user_id: str, resume_hash: str, job_id: str, kind: AgentKind, payload: dict
    ) -> str | None:
        return await self.put(user_id, CacheKind.AGENT_RESULT, resume_hash, payload, extra=(job_id, kind.value))

    async def get_processing_result(
        self, user_id: str, resume_hash: str, operation: str, job_id: str
    ) -> dict | None:
        return await self.get(user_id, CacheKind.RESUME_PROCESSING, resume_hash, extra=(operation, job_id))

    async def put_processing_result(
        self, user_id: str, resume_hash: str, operation: str, job_id: str, payload: dict
    ) -> str | None:
        return await self.put(user_id, CacheKind.RESUME_PROCESSING, resume_hash, payload, extra=(operation, job_id))

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    async def stats(self, user_id: str | None = None) -> CacheStats:
        try:
            entries = await self.store.query(user_id=user_id)
        except Exception as e:
            logger.warning(f"Failed to collect cache stats: {e}")
            return CacheStats()

        by_kind: dict[str, int] = {}
        for entry in entries:
            by_kind[entry.kind.value] = by_kind.get(entry.kind.value, 0) + 1
        total_hits = sum(e.usage.hits for e in entries)

        return CacheStats(
            total_entries=len(entries),
            by_kind=by_kind,
            total_hits=total_hits,
            average_hits=round(total_hits / len(entries), 2) if entries else 0.0,
        )

    async def cleanup_expired(self) -> int:
        """Delete every expired entry. Returns the number deleted."""
        now = self.clock()
        deleted = 0
        try:
            for entry in await self.store.query():
                if entry.is_expired(now):
                    await self.store.delete(entry.id)
                    deleted += 1
        except Exception as e:
            logger.warning(f"Cache cleanup failed: {e}")
        if deleted:
            logger.info(f"Cleaned up {deleted} expired cache entries")
        return deleted
