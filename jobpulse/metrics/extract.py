"""Job ID extraction from listing URLs."""
import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from .models import JobID

logger = logging.getLogger(__name__)

JOB_ID_PARAM = "currentJobId"


def extract_job_id(url: Optional[str]) -> Optional[JobID]:
    """
    Extract the job ID from a job listing URL.

    The ``currentJobId`` query parameter wins; otherwise the segment after
    ``/jobs/view/`` is used.

    Args:
        url: Absolute listing URL

    Returns:
        Job ID, or None if the URL is not a job listing URL
    """
    if not url or not isinstance(url, str):
        return None

    try:
        parts = urlsplit(url)
        _ = parts.port  # raises ValueError for a malformed port
    except ValueError as e:
        logger.debug("Unparsable listing URL %r: %s", url, e)
        return None

    if not parts.scheme or not parts.netloc:
        return None

    values = parse_qs(parts.query).get(JOB_ID_PARAM)
    if values and values[0]:
        return values[0]

    segments = parts.path.split("/")
    if len(segments) > 3 and segments[1] == "jobs" and segments[2] == "view":
        return segments[3] or None

    return None
