"""Listing enricher: wires the pipeline together and runs its lifecycle."""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config.settings import Settings, settings as default_settings
from jobpulse.document.base import HostDocument
from jobpulse.metrics.cache import MetricsCache
from jobpulse.metrics.client import RemoteMetricsClient
from jobpulse.pipeline.limit_handler import LimitUpdateHandler
from jobpulse.pipeline.scanner import DocumentScanner
from jobpulse.pipeline.scheduler import FetchScheduler
from jobpulse.pipeline.watcher import ChangeWatcher
from jobpulse.store import ConfigStore, SessionContext

logger = logging.getLogger(__name__)


class ListingEnricher:
    """Enrich the job listings of a host document with engagement metrics.

    Usage:
        async with ListingEnricher(document, store) as enricher:
            await enricher.wait_idle()
    """

    def __init__(
        self,
        document: HostDocument,
        store: ConfigStore,
        settings: Optional[Settings] = None,
        client: Optional[RemoteMetricsClient] = None,
        cache: Optional[MetricsCache] = None,
        fetch_scheduler: Optional[FetchScheduler] = None,
        job_scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.settings = settings or default_settings
        self.document = document
        self.store = store
        # A supplied client keeps its own context so token refreshes reach it
        self.context = getattr(client, "context", None) or SessionContext.from_store(
            store, fallback=self.settings.session_token
        )

        self.client = client or RemoteMetricsClient(
            self.context,
            base_url=self.settings.base_url,
            query_id=self.settings.query_id,
            timeout=self.settings.request_timeout_seconds,
        )
        self.cache = cache or MetricsCache()
        self.fetch_scheduler = fetch_scheduler or FetchScheduler(self.settings.max_jitter_seconds)
        self.job_scheduler = job_scheduler or AsyncIOScheduler()

        self.scanner = DocumentScanner(
            document,
            self.client,
            self.cache,
            self.fetch_scheduler,
            retry_failed=self.settings.retry_failed_entries,
        )
        self.watcher: Optional[ChangeWatcher] = None
        self.limit_handler: Optional[LimitUpdateHandler] = None
        self.threshold: Optional[int] = None

    async def __aenter__(self) -> "ListingEnricher":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> int:
        """
        Run the initial scan and start watching for changes.

        Returns:
            Number of indicators attached by the initial scan
        """
        self.threshold = self.store.limit()
        logger.info("Starting enrichment with applicant limit %d", self.threshold)

        attached = self.scanner.scan(self.threshold)
        logger.info("Initial scan attached %d indicators", attached)

        self.watcher = ChangeWatcher(
            self.document,
            self.scanner,
            self.job_scheduler,
            self.threshold,
            sweep_interval=self.settings.sweep_interval_seconds,
            max_sweeps=self.settings.max_sweeps,
            debounce=self.settings.debounce_seconds,
        )
        self.watcher.start()
        if not self.job_scheduler.running:
            self.job_scheduler.start()

        self.limit_handler = LimitUpdateHandler(
            self.store, self.context, self.document, self.scanner, self.watcher
        )
        return attached

    async def handle_message(self, message: dict) -> Optional[dict]:
        if self.limit_handler is None:
            raise RuntimeError("ListingEnricher.start() must be called first")
        return await self.limit_handler.handle(message)

    async def wait_idle(self) -> None:
        """Wait for every scheduled fetch to finish."""
        await self.fetch_scheduler.drain()

    async def close(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
        if self.job_scheduler.running:
            self.job_scheduler.shutdown(wait=False)
        self.fetch_scheduler.cancel_all()
        await self.fetch_scheduler.drain()
        await self.client.close()
        logger.info("Enrichment stopped (%d postings cached)", len(self.cache))
