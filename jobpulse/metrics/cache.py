"""In-memory metrics cache with in-flight fetch tracking."""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .models import JobID, MetricsRecord

logger = logging.getLogger(__name__)


class EntryState(Enum):
    """Lifecycle state of a cache entry."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class CacheEntry:
    """Tagged cache entry for one job ID."""

    state: EntryState
    record: Optional[MetricsRecord] = None
    future: Optional[asyncio.Future] = field(default=None, repr=False)


class MetricsCache:
    """Process-lifetime mapping from job ID to fetched metrics.

    Entries are never evicted. A resolved record is never replaced, so
    concurrent fetches for the same ID cannot change what is displayed.

    Usage:
        cache = MetricsCache()
        future = cache.begin("123")
        cache.resolve("123", record)
        cache.get("123")  # -> record
    """

    def __init__(self):
        self._entries: dict[JobID, CacheEntry] = {}

    def get(self, job_id: JobID) -> Optional[MetricsRecord]:
        """Return the resolved record for a job ID, if any."""
        entry = self._entries.get(job_id)
        if entry is None or entry.state is not EntryState.RESOLVED:
            return None
        return entry.record

    def set(self, job_id: JobID, record: MetricsRecord) -> None:
        """Store a record unconditionally, completing any in-flight fetch with it."""
        entry = self._entries.get(job_id)
        future = entry.future if entry else None
        self._entries[job_id] = CacheEntry(EntryState.RESOLVED, record=record)
        if future is not None and not future.done():
            future.set_result(record)

    def state(self, job_id: JobID) -> Optional[EntryState]:
        entry = self._entries.get(job_id)
        return entry.state if entry else None

    def pending(self, job_id: JobID) -> Optional[asyncio.Future]:
        """Return the future of an in-flight fetch for a job ID."""
        entry = self._entries.get(job_id)
        if entry is None or entry.state is not EntryState.PENDING:
            return None
        return entry.future

    def begin(self, job_id: JobID) -> asyncio.Future:
        """Register an in-flight fetch and return the future waiters share.

        Must be called from a running event loop.
        """
        existing = self.pending(job_id)
        if existing is not None:
            return existing

        future = asyncio.get_running_loop().create_future()
        self._entries[job_id] = CacheEntry(EntryState.PENDING, future=future)
        return future

    def resolve(self, job_id: JobID, record: MetricsRecord) -> MetricsRecord:
        """Complete a fetch successfully.

        Returns the record now held by the cache, which is the earlier one
        if the key was already resolved.
        """
        entry = self._entries.get(job_id)
        if entry is not None and entry.state is EntryState.RESOLVED:
            logger.debug("Job %s already cached, keeping first record", job_id)
            return entry.record

        future = entry.future if entry else None
        self._entries[job_id] = CacheEntry(EntryState.RESOLVED, record=record)
        if future is not None and not future.done():
            future.set_result(record)
        return record

    def fail(self, job_id: JobID) -> None:
        """Complete a fetch unsuccessfully. Failed keys are not cache hits."""
        entry = self._entries.get(job_id)
        if entry is not None and entry.state is EntryState.RESOLVED:
            return

        future = entry.future if entry else None
        self._entries[job_id] = CacheEntry(EntryState.FAILED)
        if future is not None and not future.done():
            future.set_result(None)

    def clear(self) -> None:
        """Drop every entry. Waiters on in-flight fetches receive None."""
        for entry in self._entries.values():
            if entry.future is not None and not entry.future.done():
                entry.future.set_result(None)
        self._entries.clear()

    def __contains__(self, job_id: object) -> bool:
        return self.get(job_id) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return sum(1 for e in self._entries.values() if e.state is EntryState.RESOLVED)
