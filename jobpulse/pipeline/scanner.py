"""Document scanning: find unprocessed listings and attach indicators."""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from jobpulse.document.base import HostDocument, IndicatorState
from jobpulse.metrics.cache import MetricsCache
from jobpulse.metrics.client import RemoteMetricsClient
from jobpulse.metrics.extract import extract_job_id
from jobpulse.metrics.models import JobID, MetricsRecord

from .renderer import build_indicator, failure_view
from .scheduler import FetchScheduler

logger = logging.getLogger(__name__)


class DocumentScanner:
    """Attach metrics indicators to every listing entry not yet processed."""

    def __init__(
        self,
        document: HostDocument,
        client: RemoteMetricsClient,
        cache: MetricsCache,
        scheduler: FetchScheduler,
        retry_failed: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the scanner.

        Args:
            document: Host document to scan
            client: Remote metrics client used on cache misses
            cache: Shared metrics cache
            scheduler: Jittered fetch scheduler
            retry_failed: Re-attempt entries whose last fetch failed
            clock: Returns the current time for listing age (defaults to now)
        """
        self.document = document
        self.client = client
        self.cache = cache
        self.scheduler = scheduler
        self.retry_failed = retry_failed
        self.clock = clock
        self.scans = 0

    def scan(self, threshold: int) -> int:
        """
        Process every listing entry that has no indicator yet.

        Must be called from a running event loop; fetches are scheduled on it.

        Args:
            threshold: Applicant threshold for rendering

        Returns:
            Number of indicators attached during this pass
        """
        self.scans += 1
        attached = 0

        for entry in self.document.query_entries():
            indicator = None
            try:
                existing = self.document.find_indicator(entry)
                if existing is not None:
                    if not (
                        self.retry_failed
                        and self.document.indicator_state(existing) is IndicatorState.FAILED
                    ):
                        continue
                    self.document.remove_indicator(existing)

                job_id = extract_job_id(self.document.entry_link(entry))
                if not job_id:
                    continue

                indicator = self.document.attach_indicator(entry)
                attached += 1
                self._resolve(job_id, indicator, threshold)
            except Exception as e:
                logger.error("Error processing listing entry: %s", e, exc_info=True)
                if indicator is not None:
                    self._show_failure(indicator)

        if attached:
            logger.debug("Scan %d attached %d indicators", self.scans, attached)
        return attached

    def _resolve(self, job_id: JobID, indicator, threshold: int) -> None:
        cached = self.cache.get(job_id)
        if cached is not None:
            self.render(indicator, cached, threshold)
            return

        pending = self.cache.pending(job_id)
        if pending is not None:
            # Same job already being fetched for another entry or an earlier pass
            logger.debug("Job %s already in flight, sharing result", job_id)
            task = asyncio.get_running_loop().create_task(
                self._await_shared(job_id, pending, indicator, threshold)
            )
            self.scheduler.track(task)
            return

        self.cache.begin(job_id)
        task = self.scheduler.schedule(job_id, lambda: self._fetch(job_id, indicator, threshold))
        # Release entries waiting on a fetch that was cancelled before finishing
        task.add_done_callback(lambda t: self.cache.fail(job_id) if t.cancelled() else None)

    async def _fetch(self, job_id: JobID, indicator, threshold: int) -> None:
        try:
            record = await self.client.fetch(job_id)
        except Exception as e:
            logger.error("Error fetching details for job %s: %s", job_id, e, exc_info=True)
            record = None

        if record is None:
            self.cache.fail(job_id)
            self.render_failure(indicator)
            return

        record = self.cache.resolve(job_id, record)
        self.render(indicator, record, threshold)

    async def _await_shared(self, job_id: JobID, pending: asyncio.Future, indicator, threshold: int) -> None:
        record: Optional[MetricsRecord] = await asyncio.shield(pending)
        if record is None:
            self.render_failure(indicator)
        else:
            self.render(indicator, record, threshold)

    def render(self, indicator, record: MetricsRecord, threshold: int) -> None:
        now = self.clock() if self.clock else None
        self.document.render(indicator, build_indicator(record, threshold, now), IndicatorState.READY)

    def render_failure(self, indicator) -> None:
        self.document.render(indicator, failure_view(), IndicatorState.FAILED)

    def _show_failure(self, indicator) -> None:
        try:
            self.render_failure(indicator)
        except Exception as e:
            logger.error("Could not render failure indicator: %s", e)
