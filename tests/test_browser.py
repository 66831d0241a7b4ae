"""Tests for the Playwright document session, against a mocked page."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from match_scraper import EvaluationError, NavigationError
from match_scraper.browser import LAYOUT_SNAPSHOT_SCRIPT, PlaywrightDocument
from tests.pages import MATCHES_V1


def count_cards(root):
    return len(root.select("li.MatchCard"))


@pytest.fixture
def page():
    page = MagicMock()
    page.url = "https://example.com/jogos"
    page.goto = AsyncMock()
    page.reload = AsyncMock()
    page.evaluate = AsyncMock()
    page.content = AsyncMock(return_value=MATCHES_V1)
    page.wait_for_timeout = AsyncMock()
    return page


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_is_taken_once_per_page_state(self, page):
        document = PlaywrightDocument(page)

        first = await document.evaluate(count_cards)
        second = await document.evaluate(count_cards)

        assert first == second > 0
        page.evaluate.assert_awaited_once_with(LAYOUT_SNAPSHOT_SCRIPT)
        assert page.content.await_count == 1

    @pytest.mark.asyncio
    async def test_reload_takes_a_fresh_snapshot(self, page):
        document = PlaywrightDocument(page)
        await document.evaluate(count_cards)

        page.content.return_value = "<html><body></body></html>"
        await document.reload()

        assert await document.evaluate(count_cards) == 0
        assert page.content.await_count == 2

    @pytest.mark.asyncio
    async def test_navigate_and_wait_drop_the_snapshot(self, page):
        document = PlaywrightDocument(page)
        await document.evaluate(count_cards)
        await document.wait(100)
        await document.evaluate(count_cards)
        await document.navigate("https://example.com/outra")
        await document.evaluate(count_cards)

        assert page.content.await_count == 3
        page.wait_for_timeout.assert_awaited_once_with(100)

    @pytest.mark.asyncio
    async def test_zero_wait_keeps_the_snapshot(self, page):
        document = PlaywrightDocument(page)
        await document.evaluate(count_cards)
        await document.wait(0)
        await document.evaluate(count_cards)

        assert page.content.await_count == 1
        page.wait_for_timeout.assert_not_awaited()


class TestErrors:
    @pytest.mark.asyncio
    async def test_snapshot_failure_is_an_evaluation_error(self, page):
        page.content.side_effect = PlaywrightError("Target closed")

        with pytest.raises(EvaluationError):
            await PlaywrightDocument(page).evaluate(count_cards)

    @pytest.mark.asyncio
    async def test_navigation_timeout_is_a_navigation_error(self, page):
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 10ms exceeded")

        with pytest.raises(NavigationError, match="Timed out"):
            await PlaywrightDocument(page).navigate("https://example.com/jogos", timeout_ms=10)
