"""Job metrics: identifiers, records, cache and remote client."""
from .cache import EntryState, MetricsCache
from .client import RemoteMetricsClient
from .extract import extract_job_id
from .models import JobID, MetricsRecord

__all__ = [
    "EntryState",
    "JobID",
    "MetricsCache",
    "MetricsRecord",
    "RemoteMetricsClient",
    "extract_job_id",
]
