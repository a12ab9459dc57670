"""Host document interface.

The enrichment pipeline never touches a concrete page object directly; it
goes through this protocol so that any tree (a parsed HTML page, a live
browser bridge, a test double) can host the indicators.
"""
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from jobpulse.pipeline.renderer import IndicatorView

Entry = Any
Indicator = Any
Unsubscribe = Callable[[], None]


class IndicatorState(Enum):
    """Processing state recorded on an indicator element."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@runtime_checkable
class HostDocument(Protocol):
    """Read/query/mutate/observe surface of the host page."""

    def query_entries(self) -> list[Entry]:
        """Return the listing entries currently in the document."""
        ...

    def entry_link(self, entry: Entry) -> Optional[str]:
        """Return the absolute URL the entry links to, if any."""
        ...

    def find_indicator(self, entry: Entry) -> Optional[Indicator]:
        ...

    def attach_indicator(self, entry: Entry) -> Indicator:
        """Insert a pending indicator as the entry's first child."""
        ...

    def indicator_state(self, indicator: Indicator) -> IndicatorState:
        ...

    def render(self, indicator: Indicator, view: IndicatorView, state: IndicatorState) -> None:
        """Replace the indicator's content with the given view."""
        ...

    def remove_indicator(self, indicator: Indicator) -> None:
        ...

    def remove_indicators(self) -> int:
        """Remove every indicator; returns how many were removed."""
        ...

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        """Call ``callback`` after each structural change made by the host."""
        ...
