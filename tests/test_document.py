"""Tests for the BeautifulSoup host document."""
from jobpulse.document.base import HostDocument, IndicatorState
from jobpulse.document.soup import INDICATOR_CLASS, SoupDocument
from jobpulse.metrics.models import MetricsRecord
from jobpulse.pipeline.renderer import build_indicator, failure_view

from conftest import PAGE_HTML, PAGE_URL


class TestSoupDocument:
    """Tests for SoupDocument."""

    def test_satisfies_protocol(self, soup_document):
        assert isinstance(soup_document, HostDocument)

    def test_query_entries_scoped_to_results_list(self, soup_document):
        ids = [entry.get("id") for entry in soup_document.query_entries()]
        assert ids == ["first", "second", "company", "promo"]

    def test_entry_link_resolves_relative_href(self, soup_document):
        first, second, _, promo = soup_document.query_entries()
        assert soup_document.entry_link(first) == (
            "https://www.linkedin.com/jobs/search/?currentJobId=111&keywords=python"
        )
        assert soup_document.entry_link(second) == "https://www.linkedin.com/jobs/view/222/?foo=bar"
        assert soup_document.entry_link(promo) is None

    def test_entry_link_without_page_url(self):
        document = SoupDocument(PAGE_HTML)
        first = document.query_entries()[0]
        assert document.entry_link(first) == "/jobs/search/?currentJobId=111&keywords=python"

    def test_attach_indicator_is_first_child_and_pending(self, soup_document):
        entry = soup_document.query_entries()[0]

        indicator = soup_document.attach_indicator(entry)

        assert entry.contents[0] is indicator
        assert INDICATOR_CLASS in indicator["class"]
        assert soup_document.find_indicator(entry) is indicator
        assert soup_document.indicator_state(indicator) is IndicatorState.PENDING
        assert indicator.select_one(".applicant-count").get_text() == "Fetching..."
        assert indicator.select_one(".listing-date").get_text() == "Checking..."

    def test_render_metrics(self, soup_document):
        entry = soup_document.query_entries()[0]
        indicator = soup_document.attach_indicator(entry)
        view = build_indicator(MetricsRecord(applicant_count=12, view_count=34), 100)

        soup_document.render(indicator, view, IndicatorState.READY)

        assert soup_document.indicator_state(indicator) is IndicatorState.READY
        assert indicator.select_one(".applicant-count").get_text() == "12 applicants"
        assert indicator.select_one(".view-count").get_text() == "34 views"
        assert indicator.select_one(".listing-date").get_text() == "New"
        assert "display: flex" in indicator["style"]

    def test_render_failure_sentinel(self, soup_document):
        entry = soup_document.query_entries()[0]
        indicator = soup_document.attach_indicator(entry)

        soup_document.render(indicator, failure_view(), IndicatorState.FAILED)

        assert soup_document.indicator_state(indicator) is IndicatorState.FAILED
        assert indicator.get_text(strip=True) == "Details unavailable"
        assert indicator.select_one(".applicant-count") is None
        assert INDICATOR_CLASS in indicator["class"]

    def test_render_into_removed_indicator_is_ignored(self, soup_document):
        entry = soup_document.query_entries()[0]
        indicator = soup_document.attach_indicator(entry)
        soup_document.remove_indicators()

        soup_document.render(indicator, failure_view(), IndicatorState.FAILED)

        assert soup_document.find_indicator(entry) is None
        assert soup_document.indicator_state(indicator) is IndicatorState.PENDING

    def test_remove_indicators(self, soup_document):
        for entry in soup_document.query_entries()[:2]:
            soup_document.attach_indicator(entry)

        assert soup_document.remove_indicators() == 2
        assert soup_document.indicators() == []
        assert soup_document.remove_indicators() == 0

    def test_append_entries_notifies(self, soup_document):
        calls = []
        soup_document.subscribe(lambda: calls.append(1))

        added = soup_document.append_entries(
            '<li class="scaffold-layout__list-item" id="third">'
            '<a href="/jobs/view/333/">ML Engineer</a></li>'
        )

        assert added == 1
        assert calls == [1]
        assert [e.get("id") for e in soup_document.query_entries()][-1] == "third"

    def test_own_indicator_edits_do_not_notify(self, soup_document):
        calls = []
        soup_document.subscribe(lambda: calls.append(1))

        indicator = soup_document.attach_indicator(soup_document.query_entries()[0])
        soup_document.render(indicator, failure_view(), IndicatorState.FAILED)
        soup_document.remove_indicators()

        assert calls == []

    def test_unsubscribe(self, soup_document):
        calls = []
        unsubscribe = soup_document.subscribe(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()

        soup_document.mutate(lambda soup: soup.find(id="promo").decompose())

        assert calls == []
        assert len(soup_document.query_entries()) == 3

    def test_failing_subscriber_does_not_block_others(self, soup_document):
        calls = []

        def broken():
            raise RuntimeError("boom")

        soup_document.subscribe(broken)
        soup_document.subscribe(lambda: calls.append(1))

        soup_document.mutate(lambda soup: None)

        assert calls == [1]

    def test_round_trip_html(self, tmp_path, soup_document):
        soup_document.attach_indicator(soup_document.query_entries()[0])
        path = tmp_path / "page.html"
        path.write_text(soup_document.to_html(), encoding="utf-8")

        reloaded = SoupDocument.from_file(path, page_url=PAGE_URL)

        assert len(reloaded.indicators()) == 1
        first = reloaded.query_entries()[0]
        assert reloaded.find_indicator(first) is not None
