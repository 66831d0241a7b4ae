"""Playwright-backed document session."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from core import settings

from .document import DocumentSession, QueryFunction
from .dom import RENDERED_HEIGHT_ATTR, RENDERED_WIDTH_ATTR
from .exceptions import EvaluationError, NavigationError

logger = logging.getLogger(__name__)

# Layout is not part of the serialized markup, so stamp each element's
# rendered box onto it before taking the snapshot.
LAYOUT_SNAPSHOT_SCRIPT = f"""
() => {{
    for (const el of document.querySelectorAll('body *')) {{
        el.setAttribute('{RENDERED_WIDTH_ATTR}', el.offsetWidth);
        el.setAttribute('{RENDERED_HEIGHT_ATTR}', el.offsetHeight);
    }}
}}
"""


class PlaywrightDocument(DocumentSession):
    """A session over a live Playwright page.

    The layout-stamped snapshot is taken once and reused by later evaluates
    until the page navigates, reloads or waits.
    """

    def __init__(self: "PlaywrightDocument", page: Page) -> None:
        self.page = page
        self._soup: BeautifulSoup | None = None

    @property
    def url(self: "PlaywrightDocument") -> str | None:
        return self.page.url

    async def navigate(
        self: "PlaywrightDocument",
        url: str,
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        logger.info(f"Navigating to {url}")
        self._soup = None
        try:
            await self.page.goto(url, wait_until=wait_policy, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"Timed out after {timeout_ms}ms loading {url}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Could not load {url}: {e}") from e

    async def reload(
        self: "PlaywrightDocument",
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        self._soup = None
        try:
            await self.page.reload(wait_until=wait_policy, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"Timed out after {timeout_ms}ms reloading {self.page.url}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Could not reload {self.page.url}: {e}") from e

    async def evaluate(self: "PlaywrightDocument", fn: QueryFunction, *args: Any) -> Any:
        if self._soup is None:
            try:
                await self.page.evaluate(LAYOUT_SNAPSHOT_SCRIPT)
                html = await self.page.content()
            except PlaywrightError as e:
                raise EvaluationError(f"Could not snapshot {self.page.url}: {e}") from e
            self._soup = BeautifulSoup(html, "html.parser")
        return fn(self._soup, *args)

    async def wait(self: "PlaywrightDocument", ms: int) -> None:
        if ms > 0:
            self._soup = None
            await self.page.wait_for_timeout(ms)


@asynccontextmanager
async def open_document(
    headless: bool = settings.HEADLESS,
    viewport: dict[str, int] | None = None,
) -> AsyncIterator[PlaywrightDocument]:
    """Launch Chromium and yield a session on a fresh page."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless, args=settings.BROWSER_ARGS)
        try:
            page = await browser.new_page(viewport=viewport or settings.VIEWPORT)
            yield PlaywrightDocument(page)
        finally:
            await browser.close()
