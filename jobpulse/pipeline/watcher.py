"""Re-scan triggers: document mutations and a bounded periodic sweep."""
import asyncio
import logging
from typing import Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobpulse.document.base import HostDocument, Unsubscribe

from .scanner import DocumentScanner

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "listing_sweep"


class ChangeWatcher:
    """Keep indicators in step with a document that keeps changing.

    Mutation bursts are coalesced with a trailing-edge debounce before a
    re-scan. The periodic sweep catches entries rendered before the
    subscription was attached and cancels itself after ``max_sweeps`` runs.
    """

    def __init__(
        self,
        document: HostDocument,
        scanner: DocumentScanner,
        scheduler: BaseScheduler,
        threshold: int,
        sweep_interval: float = 3.0,
        max_sweeps: int = 10,
        debounce: float = 0.25,
    ):
        """
        Initialize the watcher.

        Args:
            document: Document to observe
            scanner: Scanner to re-run
            scheduler: APScheduler scheduler hosting the sweep job
            threshold: Applicant threshold passed to every re-scan
            sweep_interval: Seconds between periodic sweeps
            max_sweeps: Number of sweeps before the sweep job removes itself
            debounce: Quiet period in seconds after the last mutation
        """
        self.document = document
        self.scanner = scanner
        self.scheduler = scheduler
        self.threshold = threshold
        self.sweep_interval = sweep_interval
        self.max_sweeps = max_sweeps
        self.debounce = debounce

        self.sweeps = 0
        self.mutations = 0
        self.rescans = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._sweep_job: Optional[Job] = None

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    @property
    def sweeping(self) -> bool:
        return self._sweep_job is not None

    def start(self) -> None:
        """Subscribe to mutations and add the sweep job. Call from the event loop."""
        if self.running:
            return

        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self.document.subscribe(self._on_mutation)

        if self.max_sweeps > 0:
            self._sweep_job = self.scheduler.add_job(
                self._sweep,
                IntervalTrigger(seconds=self.sweep_interval),
                id=SWEEP_JOB_ID,
                name="Listing sweep",
                max_instances=1,
                replace_existing=True,
            )
        logger.info(
            "Watching for listing changes (sweep every %.1fs, %d times)",
            self.sweep_interval, self.max_sweeps,
        )

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        self._remove_sweep()

    def update_threshold(self, threshold: int) -> None:
        self.threshold = threshold

    def _on_mutation(self) -> None:
        self.mutations += 1
        if self._loop is None:
            return
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._loop.call_later(self.debounce, self._rescan)

    def _rescan(self) -> None:
        self._debounce_handle = None
        self.rescans += 1
        try:
            self.scanner.scan(self.threshold)
        except Exception as e:
            logger.error("Re-scan after document change failed: %s", e, exc_info=True)

    async def _sweep(self) -> None:
        self.sweeps += 1
        try:
            self.scanner.scan(self.threshold)
        except Exception as e:
            logger.error("Periodic sweep %d failed: %s", self.sweeps, e, exc_info=True)

        if self.sweeps >= self.max_sweeps:
            logger.debug("Sweep limit of %d reached", self.max_sweeps)
            self._remove_sweep()

    def _remove_sweep(self) -> None:
        if self._sweep_job is None:
            return
        job, self._sweep_job = self._sweep_job, None
        try:
            job.remove()
        except JobLookupError:
            logger.debug("Sweep job already removed")
