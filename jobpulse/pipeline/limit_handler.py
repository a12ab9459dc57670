"""Handling of "limit changed" control messages."""
import logging
from typing import Optional

from jobpulse.document.base import HostDocument
from jobpulse.store import ConfigStore, SessionContext

from .scanner import DocumentScanner
from .watcher import ChangeWatcher

logger = logging.getLogger(__name__)

UPDATE_LIMIT_ACTION = "updateLimit"


class LimitUpdateHandler:
    """Re-render every indicator against a new applicant threshold.

    The metrics cache is left intact, so cached postings are re-rendered
    without another remote call.
    """

    def __init__(
        self,
        store: ConfigStore,
        context: SessionContext,
        document: HostDocument,
        scanner: DocumentScanner,
        watcher: Optional[ChangeWatcher] = None,
    ):
        self.store = store
        self.context = context
        self.document = document
        self.scanner = scanner
        self.watcher = watcher

    async def handle(self, message: dict) -> Optional[dict]:
        """
        Handle an inbound control message.

        Args:
            message: Message such as ``{"action": "updateLimit"}``

        Returns:
            Acknowledgement with the new limit, or None for unknown actions
        """
        if not isinstance(message, dict) or message.get("action") != UPDATE_LIMIT_ACTION:
            logger.debug("Ignoring control message: %r", message)
            return None

        new_limit = await self.update_limit()
        return {"status": "limit updated", "newLimit": new_limit}

    async def update_limit(self) -> int:
        """Reload settings, clear indicators and re-scan with the new limit."""
        self.store.reload()
        new_limit = self.store.limit()

        token = self.store.session_token()
        if token and token != self.context.token:
            logger.info("Session token changed, refreshing")
            self.context.update(token)

        removed = self.document.remove_indicators()
        if self.watcher is not None:
            self.watcher.update_threshold(new_limit)

        attached = self.scanner.scan(new_limit)
        logger.info(
            "Limit updated to %d: removed %d indicators, attached %d",
            new_limit, removed, attached,
        )
        return new_limit
