"""Tests for job ID extraction."""
import pytest

from jobpulse.metrics.extract import extract_job_id


class TestExtractJobId:
    """Tests for extract_job_id."""

    def test_view_path_with_unrelated_query(self):
        """Path segment after /jobs/view/ is used when there is no currentJobId."""
        assert extract_job_id("https://host/jobs/view/4211887733/?foo=bar") == "4211887733"

    def test_current_job_id_param(self):
        url = "https://www.linkedin.com/jobs/search/?currentJobId=3998877665&keywords=python"
        assert extract_job_id(url) == "3998877665"

    def test_query_param_wins_over_path(self):
        url = "https://www.linkedin.com/jobs/view/111/?currentJobId=222"
        assert extract_job_id(url) == "222"

    def test_param_returned_verbatim(self):
        assert extract_job_id("https://host/jobs/collections/?currentJobId=abc-42") == "abc-42"

    def test_view_path_without_trailing_slash(self):
        assert extract_job_id("https://host/jobs/view/555") == "555"

    def test_view_path_with_slug_segment(self):
        """Only the segment directly after /jobs/view/ is taken."""
        assert extract_job_id("https://host/jobs/view/777/details/more") == "777"

    def test_empty_param_falls_back_to_path(self):
        assert extract_job_id("https://host/jobs/view/888/?currentJobId=") == "888"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.linkedin.com/company/acme/",
            "https://host/jobs/",
            "https://host/jobs/view/",
            "https://host/jobs/search/?keywords=python",
            "https://host/en/jobs/view/123/",
            "/jobs/view/123/",
            "not a url",
            "http://[::1",
            "https://host:notaport/jobs/view/123/",
            "",
            None,
        ],
    )
    def test_non_listing_urls_return_none(self, url):
        assert extract_job_id(url) is None
