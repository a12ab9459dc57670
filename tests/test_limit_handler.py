"""Tests for limit update handling."""
from unittest.mock import MagicMock

import pytest

from jobpulse.pipeline.limit_handler import LimitUpdateHandler
from jobpulse.store import ConfigStore, SessionContext

from conftest import badge_text


def _handler(store, soup_document, scanner, watcher=None, context=None):
    return LimitUpdateHandler(
        store, context or SessionContext("ajax:1"), soup_document, scanner, watcher
    )


class TestLimitUpdateHandler:
    """Tests for LimitUpdateHandler."""

    @pytest.mark.asyncio
    async def test_reply_carries_new_limit(self, store, soup_document, scanner):
        handler = _handler(store, soup_document, scanner)
        ConfigStore(store.path).set("limit", 200)

        reply = await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()

        assert reply == {"status": "limit updated", "newLimit": 200}

    @pytest.mark.asyncio
    async def test_rerenders_from_cache_without_refetch(self, store, soup_document, scanner, fake_client):
        """Cached postings are re-rendered against the new limit with no remote call."""
        store.set("limit", 300)
        scanner.scan(store.limit())
        await scanner.scheduler.drain()
        first = soup_document.soup.find(id="first").select_one(".applicant-count")
        assert "#006400" in first["style"]
        assert badge_text(soup_document, "first", "applicant-count") == "250 applicants"
        calls_before = list(fake_client.calls)

        ConfigStore(store.path).set("limit", 200)
        handler = _handler(store, soup_document, scanner)
        await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()

        assert fake_client.calls == calls_before
        assert len(soup_document.indicators()) == 2
        first = soup_document.soup.find(id="first").select_one(".applicant-count")
        # 250 >= 200 now renders red
        assert "#cc0000" in first["style"]

    @pytest.mark.asyncio
    async def test_indicators_replaced_not_duplicated(self, store, soup_document, scanner):
        scanner.scan(300)
        await scanner.scheduler.drain()

        handler = _handler(store, soup_document, scanner)
        await handler.handle({"action": "updateLimit"})
        await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()

        for entry_id in ("first", "second"):
            entry = soup_document.soup.find(id=entry_id)
            assert len(entry.select(".job-metrics-element")) == 1

    @pytest.mark.asyncio
    async def test_updates_watcher_threshold(self, store, soup_document, scanner):
        store.set("limit", 50)
        watcher = MagicMock()
        handler = _handler(store, soup_document, scanner, watcher=watcher)

        await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()

        watcher.update_threshold.assert_called_once_with(50)

    @pytest.mark.asyncio
    async def test_refreshes_session_token(self, store, soup_document, scanner):
        context = SessionContext(None)
        store.set("session-token", "ajax:fresh")
        handler = _handler(store, soup_document, scanner, context=context)

        await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()

        assert context.token == "ajax:fresh"

    @pytest.mark.asyncio
    async def test_default_limit_when_unset(self, store, soup_document, scanner):
        handler = _handler(store, soup_document, scanner)
        reply = await handler.handle({"action": "updateLimit"})
        await scanner.scheduler.drain()
        assert reply["newLimit"] == 300

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [{"action": "somethingElse"}, {}, "updateLimit", None])
    async def test_unknown_messages_ignored(self, store, soup_document, scanner, message):
        scanner.scan(300)
        await scanner.scheduler.drain()
        handler = _handler(store, soup_document, scanner)

        assert await handler.handle(message) is None
        assert len(soup_document.indicators()) == 2
