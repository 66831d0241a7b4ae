"""Document sessions - the browser-automation collaborator seen by the core.

The core never touches a browser directly. It asks a session to navigate,
reload, wait, and to evaluate a query function against the current document.
Query functions receive a BeautifulSoup snapshot of the live page and must
return plain serializable data (lists, dicts, strings, numbers).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from bs4 import BeautifulSoup

from core import settings

logger = logging.getLogger(__name__)

QueryFunction = Callable[..., Any]


class DocumentSession(ABC):
    """One live document, driven cooperatively by a single caller."""

    @abstractmethod
    async def navigate(
        self: "DocumentSession",
        url: str,
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        """Load ``url``. Raises NavigationError on failure or timeout."""

    @abstractmethod
    async def evaluate(self: "DocumentSession", fn: QueryFunction, *args: Any) -> Any:
        """Run ``fn(root, *args)`` against the current document and return its result."""

    @abstractmethod
    async def reload(
        self: "DocumentSession",
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        """Reload the current document. Raises NavigationError on failure or timeout."""

    async def wait(self: "DocumentSession", ms: int) -> None:
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    @property
    def url(self: "DocumentSession") -> str | None:
        return None


class StaticDocument(DocumentSession):
    """A session over an HTML string, used for fetched responses and fixtures.

    ``replace`` swaps the markup mid-session, which is how a site redeploy
    looks from the core's point of view. ``pages`` optionally maps URLs to
    markup for ``navigate``.
    """

    def __init__(
        self: "StaticDocument",
        html: str = "",
        url: str | None = None,
        pages: dict[str, str] | None = None,
    ) -> None:
        self._html = html
        self._url = url
        self._pages = dict(pages or {})
        self._soup: BeautifulSoup | None = None
        self.reload_count = 0

    @property
    def url(self: "StaticDocument") -> str | None:
        return self._url

    @property
    def html(self: "StaticDocument") -> str:
        return self._html

    def replace(self: "StaticDocument", html: str) -> None:
        self._html = html
        self._soup = None

    async def navigate(
        self: "StaticDocument",
        url: str,
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        if url in self._pages:
            self.replace(self._pages[url])
        self._url = url
        logger.debug(f"Static navigation to {url}")

    async def evaluate(self: "StaticDocument", fn: QueryFunction, *args: Any) -> Any:
        if self._soup is None:
            self._soup = BeautifulSoup(self._html, "html.parser")
        return fn(self._soup, *args)

    async def reload(
        self: "StaticDocument",
        wait_policy: str = settings.DEFAULT_WAIT_POLICY,
        timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS,
    ) -> None:
        self.reload_count += 1
        self._soup = None
