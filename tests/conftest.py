"""Pytest fixtures for jobpulse tests."""
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jobpulse.document.soup import SoupDocument
from jobpulse.metrics.cache import MetricsCache
from jobpulse.metrics.models import MetricsRecord
from jobpulse.pipeline.scanner import DocumentScanner
from jobpulse.pipeline.scheduler import FetchScheduler
from jobpulse.store import ConfigStore


PAGE_URL = "https://www.linkedin.com/jobs/search/"

PAGE_HTML = """
<html><body>
<div class="scaffold-layout__list">
  <ul>
    <li class="scaffold-layout__list-item" id="first">
      <a href="/jobs/search/?currentJobId=111&keywords=python">Backend Engineer</a>
    </li>
    <li class="scaffold-layout__list-item" id="second">
      <a href="https://www.linkedin.com/jobs/view/222/?foo=bar">Data Engineer</a>
    </li>
    <li class="scaffold-layout__list-item" id="company">
      <a href="https://www.linkedin.com/company/acme/">Acme Corp</a>
    </li>
    <li class="scaffold-layout__list-item" id="promo"><span>Promoted</span></li>
  </ul>
</div>
<ul>
  <li class="scaffold-layout__list-item"><a href="/jobs/view/999/">Outside the results list</a></li>
</ul>
</body></html>
"""


# =============================================================================
# FAKES
# =============================================================================


class FakeMetricsClient:
    """Stands in for RemoteMetricsClient; records every fetch."""

    def __init__(self, records: Optional[dict] = None):
        self.records = records or {}
        self.calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, job_id: str) -> Optional[MetricsRecord]:
        self.calls.append(job_id)
        if self.gate is not None:
            await self.gate.wait()
        return self.records.get(job_id)

    async def close(self) -> None:
        pass


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def sample_records(now):
    """Records for the two enrichable listings on the sample page."""
    return {
        "111": MetricsRecord(
            applicant_count=250,
            view_count=1000,
            original_listed_at=now - timedelta(days=2, hours=1),
        ),
        "222": MetricsRecord(applicant_count=500, view_count=40, original_listed_at=None),
    }


@pytest.fixture
def soup_document():
    return SoupDocument(PAGE_HTML, page_url=PAGE_URL)


@pytest.fixture
def fake_client(sample_records):
    return FakeMetricsClient(dict(sample_records))


@pytest.fixture
def cache():
    return MetricsCache()


@pytest.fixture
def scanner(soup_document, fake_client, cache):
    """Scanner with jitter disabled."""
    return DocumentScanner(soup_document, fake_client, cache, FetchScheduler(max_jitter=0))


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "settings.yaml")


def badge_text(document: SoupDocument, entry_id: str, slot: str) -> Optional[str]:
    """Text of a badge inside the indicator of the entry with the given id."""
    entry = document.soup.find(id=entry_id)
    badge = entry.select_one(f".job-metrics-element .{slot}")
    return badge.get_text() if badge else None
