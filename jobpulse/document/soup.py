"""BeautifulSoup-backed host document for saved job search pages."""
import logging
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from jobpulse.pipeline.renderer import IndicatorView, pending_view

from .base import IndicatorState, Unsubscribe

logger = logging.getLogger(__name__)

ENTRY_SELECTOR = ".scaffold-layout__list li.scaffold-layout__list-item"
INDICATOR_CLASS = "job-metrics-element"
STATE_ATTR = "data-state"


class SoupDocument:
    """Job search results page held as a BeautifulSoup tree.

    Host mutations (``append_entries``, ``mutate``) notify subscribers.
    Indicator edits made by the pipeline itself do not.
    """

    def __init__(
        self,
        html: str,
        page_url: Optional[str] = None,
        entry_selector: str = ENTRY_SELECTOR,
    ):
        """
        Initialize the document.

        Args:
            html: Page markup
            page_url: URL the page was loaded from, used to resolve relative links
            entry_selector: CSS selector matching listing entries
        """
        self.soup = BeautifulSoup(html, "html.parser")
        self.page_url = page_url
        self.entry_selector = entry_selector
        self._subscribers: list[Callable[[], None]] = []

    @classmethod
    def from_file(cls, path: str | Path, page_url: Optional[str] = None) -> "SoupDocument":
        with open(path, encoding="utf-8") as f:
            return cls(f.read(), page_url=page_url)

    def to_html(self) -> str:
        return str(self.soup)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query_entries(self) -> list[Tag]:
        return self.soup.select(self.entry_selector)

    def entry_link(self, entry: Tag) -> Optional[str]:
        """First anchor's href, resolved against the page URL."""
        anchor = entry.find("a")
        if anchor is None:
            return None
        href = anchor.get("href")
        if not href:
            return None
        return urljoin(self.page_url, href) if self.page_url else href

    def find_indicator(self, entry: Tag) -> Optional[Tag]:
        return entry.find(class_=INDICATOR_CLASS)

    def indicators(self) -> list[Tag]:
        return self.soup.select(f".{INDICATOR_CLASS}")

    def indicator_state(self, indicator: Tag) -> IndicatorState:
        try:
            return IndicatorState(indicator.get(STATE_ATTR, IndicatorState.READY.value))
        except ValueError:
            return IndicatorState.READY

    # ------------------------------------------------------------------
    # Indicator mutation
    # ------------------------------------------------------------------

    def attach_indicator(self, entry: Tag) -> Tag:
        indicator = self.soup.new_tag("div")
        indicator["class"] = [INDICATOR_CLASS]
        self._draw(indicator, pending_view(), IndicatorState.PENDING)
        entry.insert(0, indicator)
        return indicator

    def render(self, indicator: Tag, view: IndicatorView, state: IndicatorState) -> None:
        if indicator.parent is None:
            # Removed by a limit update while its fetch was in flight
            logger.debug("Indicator detached, skipping render")
            return
        self._draw(indicator, view, state)

    def _draw(self, indicator: Tag, view: IndicatorView, state: IndicatorState) -> None:
        indicator.clear()
        indicator[STATE_ATTR] = state.value
        indicator["style"] = view.container_css

        for badge in view.badges:
            child = self.soup.new_tag("div")
            if badge.slot:
                child["class"] = [badge.slot]
            if badge.css:
                child["style"] = badge.css
            child.string = badge.text
            indicator.append(child)

    def remove_indicator(self, indicator: Tag) -> None:
        indicator.extract()

    def remove_indicators(self) -> int:
        indicators = self.indicators()
        for indicator in indicators:
            indicator.extract()
        return len(indicators)

    # ------------------------------------------------------------------
    # Host mutations and change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception as e:
                logger.error("Mutation subscriber failed: %s", e, exc_info=True)

    def append_entries(self, html: str) -> int:
        """
        Append listing entries to the results list, as infinite scroll does.

        Args:
            html: Markup of one or more ``<li>`` entries

        Returns:
            Number of elements appended
        """
        container = self._list_container()
        fragment = BeautifulSoup(html, "html.parser")
        added = 0
        for node in list(fragment.contents):
            if isinstance(node, Tag):
                container.append(node.extract())
                added += 1

        if added:
            self._notify()
        return added

    def mutate(self, change: Callable[[BeautifulSoup], None]) -> None:
        """Apply an arbitrary host change to the tree and notify subscribers."""
        change(self.soup)
        self._notify()

    def _list_container(self) -> Tag:
        entries = self.query_entries()
        if entries and entries[-1].parent is not None:
            return entries[-1].parent

        for selector in (".scaffold-layout__list ul", ".scaffold-layout__list"):
            container = self.soup.select_one(selector)
            if container is not None:
                return container

        return self.soup.body or self.soup

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} entries={len(self.query_entries())}>"
