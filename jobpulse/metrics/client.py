"""Remote metrics client for the LinkedIn voyager API."""
import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp
from yarl import URL

from jobpulse.exceptions import MetricsFetchError
from jobpulse.store import SessionContext

from .models import JobID, MetricsRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.linkedin.com"
DEFAULT_QUERY_ID = "voyagerJobsDashJobPostingDetailSections.c07b0d44515bceba51a9b73c01b0cecb"

DETAILS_ACCEPT = "application/vnd.linkedin.normalized+json+2.1"

# Path to the applicant count inside the insights response
APPLICANT_COUNT_PATH = (
    "data",
    "jobsDashJobPostingDetailSectionsByCardSectionTypes",
    "elements",
    0,
    "jobPostingDetailSection",
    0,
    "jobApplicantInsightsUrn",
    "applicantCount",
)


def dig(data: Any, path: tuple) -> Any:
    """Follow a path of dict keys / list indexes, returning None on any miss."""
    current = data
    for segment in path:
        if isinstance(segment, int):
            if not isinstance(current, list) or len(current) <= segment:
                return None
        elif not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current


def _as_int(value: Any) -> int:
    """Coerce a count from the API, treating missing or bad values as 0."""
    if not value or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (ValueError, TypeError):
        return 0


class RemoteMetricsClient:
    """Fetch applicant count, views and listing date for a job posting.

    Each fetch makes two sequential calls: the posting details call, then
    the applicant insights call. Either failing fails the whole fetch.

    Usage:
        async with RemoteMetricsClient(SessionContext(token)) as client:
            record = await client.fetch("4211887733")
    """

    def __init__(
        self,
        context: SessionContext,
        base_url: str = DEFAULT_BASE_URL,
        query_id: str = DEFAULT_QUERY_ID,
        timeout: float = 15,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the client.

        Args:
            context: Session context supplying the csrf token
            base_url: Scheme and host of the metadata service
            query_id: GraphQL query identifier for applicant insights
            timeout: Per-request timeout in seconds
            session: Optional externally managed aiohttp session
        """
        self.context = context
        self.base_url = base_url.rstrip("/")
        self.query_id = query_id
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self.requests_made = 0

    async def __aenter__(self) -> "RemoteMetricsClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def details_url(self, job_id: JobID) -> str:
        return f"{self.base_url}/voyager/api/jobs/jobPostings/{job_id}"

    def insights_url(self, job_id: JobID) -> str:
        urn = quote(f"urn:li:fsd_jobPosting:{job_id}", safe="")
        variables = (
            "(cardSectionTypes:List(JOB_APPLICANT_INSIGHTS),"
            f"jobPostingUrn:{urn},"
            "includeSecondaryActionsV2:true)"
        )
        return f"{self.base_url}/voyager/api/graphql?variables={variables}&queryId={self.query_id}"

    def _details_headers(self, token: str) -> dict[str, str]:
        return {
            "accept": DETAILS_ACCEPT,
            "accept-language": "en-US,en;q=0.9",
            "csrf-token": token,
            "sec-fetch-dest": "empty",
            "sec-fetch-mode": "cors",
            "sec-fetch-site": "same-origin",
        }

    async def _get_json(self, job_id: JobID, url: str, headers: dict[str, str]) -> Any:
        """Single GET attempt; raises MetricsFetchError on any failure."""
        session = self._get_session()
        self.requests_made += 1

        try:
            async with session.get(
                URL(url, encoded=True),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise MetricsFetchError(job_id, f"HTTP {response.status} from {url}")
                # Voyager answers with vendor content types
                return await response.json(content_type=None)
        except MetricsFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise MetricsFetchError(job_id, f"timeout requesting {url}") from e
        except aiohttp.ClientError as e:
            raise MetricsFetchError(job_id, f"request to {url} failed: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise MetricsFetchError(job_id, f"invalid JSON from {url}: {e}") from e

    async def fetch_details(self, job_id: JobID, token: str) -> tuple[int, Any]:
        """Return (views, originalListedAt) for a posting."""
        data = await self._get_json(job_id, self.details_url(job_id), self._details_headers(token))
        if not isinstance(data, dict):
            raise MetricsFetchError(job_id, "details response is not an object")
        return _as_int(dig(data, ("data", "views"))), dig(data, ("data", "originalListedAt"))

    async def fetch_applicant_count(self, job_id: JobID, token: str) -> int:
        data = await self._get_json(job_id, self.insights_url(job_id), {"csrf-token": token})
        return _as_int(dig(data, APPLICANT_COUNT_PATH))

    async def fetch(self, job_id: JobID) -> Optional[MetricsRecord]:
        """
        Fetch metrics for a job posting.

        Args:
            job_id: Job ID to fetch

        Returns:
            MetricsRecord, or None if there is no session token or any call failed
        """
        token = self.context.token
        if not token:
            logger.info("Session token is not available, skipping job %s", job_id)
            return None

        try:
            views, listed_at = await self.fetch_details(job_id, token)
            applicants = await self.fetch_applicant_count(job_id, token)
        except MetricsFetchError as e:
            logger.warning("%s", e)
            return None

        record = MetricsRecord(
            applicant_count=applicants,
            view_count=views,
            original_listed_at=MetricsRecord.parse_listed_at(listed_at),
        )
        logger.debug("Fetched metrics for job %s: %s", job_id, record)
        return record

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.base_url}>"
