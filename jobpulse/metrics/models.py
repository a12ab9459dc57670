"""Metrics data structures."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

JobID = str


@dataclass(frozen=True)
class MetricsRecord:
    """Engagement metrics for a single job posting.

    A ``None`` applicant count means the applicant insights were not
    available; the record itself is still valid.
    """

    applicant_count: Optional[int]
    view_count: int = 0
    original_listed_at: Optional[datetime] = None

    @staticmethod
    def parse_listed_at(timestamp) -> Optional[datetime]:
        """Convert an epoch timestamp (seconds or milliseconds) to a UTC datetime."""
        if not timestamp:
            return None
        try:
            ts = int(timestamp)
            # Millisecond timestamps have 13 digits
            if ts > 10000000000:
                ts = ts // 1000
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (ValueError, TypeError, OverflowError, OSError):
            return None
