"""Tests for the scrape_matches command."""

from contextlib import asynccontextmanager

import pytest

import scrape_matches
from core import settings
from match_scraper import AdaptiveMatchScraper, RecoveryResult, StaticDocument
from tests.pages import EMPTY_PAGE, MATCHES_V1


@pytest.fixture
def offline(monkeypatch, tmp_path):
    document = StaticDocument(EMPTY_PAGE)

    @asynccontextmanager
    async def fake_open_document():
        yield document

    monkeypatch.setattr(scrape_matches, "open_document", fake_open_document)
    monkeypatch.setattr(settings, "HISTORY_DIR", tmp_path)
    monkeypatch.setattr(settings, "INITIAL_SETTLE_MS", 0)
    return document


class TestScrape:
    @pytest.mark.asyncio
    async def test_prints_selectors_found_by_recovery(self, offline, monkeypatch, capsys):
        async def fake_recovery(self, session, url=None):
            session.replace(MATCHES_V1)
            await self.resolve_selectors(session)
            return RecoveryResult(
                succeeded=True,
                attempts=1,
                history=(),
                metrics=self.metrics,
                selectors=self.selectors.copy(),
            )

        monkeypatch.setattr(AdaptiveMatchScraper, "run_with_recovery", fake_recovery)

        assert await scrape_matches.scrape("https://example.com/jogos") == 0

        out = capsys.readouterr().out
        assert 'ul[class*="MatchCardsList"] > li' in out
        assert "card         None" not in out
        assert "Matches (0)" not in out

    @pytest.mark.asyncio
    async def test_failed_recovery_exits_with_error(self, offline, monkeypatch, capsys):
        async def fake_recovery(self, session, url=None):
            return RecoveryResult(
                succeeded=False,
                attempts=1,
                history=(),
                metrics=self.metrics,
                selectors=self.selectors.copy(),
            )

        monkeypatch.setattr(AdaptiveMatchScraper, "run_with_recovery", fake_recovery)

        assert await scrape_matches.scrape("https://example.com/jogos") == 1
        assert "Matches (0)" in capsys.readouterr().out
