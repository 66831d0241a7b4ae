import logging
import re
from collections.abc import Callable
from typing import Any

from bs4 import BeautifulSoup, Tag

from core import settings

from .categories import Category
from .document import DocumentSession
from .dom import (
    CLOCK_RE,
    DIGITS_ONLY_RE,
    HASHED_CLASS_RE,
    class_list,
    class_text,
    clean_text,
    has_card_class,
    has_text_children,
    is_clock,
    is_large_enough,
    mentions_status,
    select_safe,
    synthesize_selector,
)
from .models import ResolvedSelectorSet, SelectorCandidate, now_timestamp
from .selector_catalog import SelectorCatalog

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^h[1-6]$|^header$")


def score_pattern(pattern: str, match_count: int) -> float:
    """Priority of a working pattern: match count plus specificity bonuses.

    Hashed CSS-module classes, attribute-contains tests and direct-child
    combinators are the forms most likely to be tied to this site's markup,
    so they outrank generic patterns that happen to match more elements.
    """
    priority = float(match_count)
    if HASHED_CLASS_RE.search(pattern):
        priority += settings.HASHED_CLASS_BONUS
    if "*=" in pattern:
        priority += settings.ATTRIBUTE_CONTAINS_BONUS
    if ">" in pattern:
        priority += settings.DIRECT_CHILD_BONUS
    return priority


def _test_candidates(root: BeautifulSoup, patterns: dict[str, list[str]]) -> dict[str, list[dict[str, Any]]]:
    """Query every pattern of every category; keep the ones matching anything."""
    results = {}
    for category, category_patterns in patterns.items():
        working = []
        for pattern in category_patterns:
            matches = select_safe(root, pattern)
            if matches:
                working.append(
                    {
                        "pattern": pattern,
                        "count": len(matches),
                        "sample": clean_text(matches[0].get_text(" "))[: settings.SAMPLE_TEXT_LENGTH],
                    }
                )
        results[category] = working
    return results


def _element_text(element: Tag) -> str:
    return clean_text(element.get_text(" "))


def _looks_like_card(element: Tag) -> bool:
    return element.name in settings.CARD_TAGS and has_card_class(element) and is_large_enough(element)


def _looks_like_team_name(element: Tag) -> bool:
    classes = class_text(element)
    if "team" not in classes and "name" not in classes:
        return False
    text = _element_text(element)
    return (
        settings.TEAM_NAME_MIN_LENGTH <= len(text) < settings.TEAM_NAME_MAX_LENGTH
        and not CLOCK_RE.search(text)
    )


def _looks_like_kickoff_time(element: Tag) -> bool:
    return element.name == "time" or is_clock(_element_text(element))


def _looks_like_score(element: Tag) -> bool:
    classes = class_text(element)
    return "score" in classes or "placar" in classes or bool(DIGITS_ONLY_RE.match(_element_text(element)))


def _looks_like_status(element: Tag) -> bool:
    classes = class_text(element)
    if "status" in classes or "live" in classes:
        return True
    # Only leaves, otherwise <body> "mentions" every status on the page.
    return not has_text_children(element) and mentions_status(_element_text(element))


def _looks_like_competition(element: Tag) -> bool:
    classes = class_text(element)
    if not any(hint in classes for hint in ("title", "header", "competition", "league")):
        return False
    if not (HEADING_RE.match(element.name) or "title" in classes):
        return False
    return len(_element_text(element)) > settings.COMPETITION_MIN_LENGTH


MINING_PREDICATES: dict[Category, Callable[[Tag], bool]] = {
    Category.CARD: _looks_like_card,
    Category.TEAM_NAME: _looks_like_team_name,
    Category.KICKOFF_TIME: _looks_like_kickoff_time,
    Category.SCORE: _looks_like_score,
    Category.STATUS: _looks_like_status,
    Category.COMPETITION: _looks_like_competition,
}


def _mine_candidates(root: BeautifulSoup, category: str, limit: int) -> list[dict[str, Any]]:
    """Synthesize selectors for elements that look like ``category``, in document order."""
    predicate = MINING_PREDICATES[Category(category)]
    found = []
    seen = set()
    for element in root.find_all(True):
        if len(found) >= limit:
            break
        if not predicate(element):
            continue
        selector = synthesize_selector(element)
        if selector in seen:
            continue
        seen.add(selector)
        found.append(
            {
                "selector": selector,
                "tag": element.name,
                "classes": class_list(element),
                "text": _element_text(element)[: settings.SAMPLE_TEXT_LENGTH],
                "count": len(select_safe(root, selector)),
            }
        )
    return found


class SelectorResolver:
    """Picks the best working selector per category on the live document.

    Works by:
    1. Testing every catalog candidate in one document query
    2. Ranking the working ones with ``score_pattern``
    3. Mining the document for new candidates where nothing matched
    """

    def __init__(self: "SelectorResolver", catalog: SelectorCatalog) -> None:
        self.catalog = catalog
        self.last_candidates: dict[Category, list[SelectorCandidate]] = {}
        self.history: list[dict[str, Any]] = []

    async def resolve(
        self: "SelectorResolver",
        session: DocumentSession,
        into: ResolvedSelectorSet | None = None,
        mine_unresolved: bool = True,
    ) -> ResolvedSelectorSet:
        """Resolve selectors for every category.

        Args:
            session: Document to test candidates against
            into: Existing set to update in place; categories that resolve to
                nothing keep their current value. A fresh set is used if omitted.
            mine_unresolved: Mine the document for categories no candidate matched

        Returns:
            The updated selector set. Categories with no working candidate are None
            in a fresh set.
        """
        logger.info("Resolving selectors...")
        selectors = into if into is not None else ResolvedSelectorSet()

        patterns = {category.value: self.catalog.candidates_for(category) for category in Category}
        results = await session.evaluate(_test_candidates, patterns)

        unresolved = []
        for category in Category:
            candidates = [
                SelectorCandidate(
                    pattern=item["pattern"],
                    priority=score_pattern(item["pattern"], item["count"]),
                    match_count=item["count"],
                    sample_text=item["sample"],
                )
                for item in results.get(category.value, [])
            ]
            # Stable sort: ties keep catalog trial order.
            candidates.sort(key=lambda candidate: candidate.priority, reverse=True)
            self.last_candidates[category] = candidates

            if candidates:
                selectors[category] = candidates[0].pattern
                self.catalog.promote(category, [candidate.pattern for candidate in candidates])
            else:
                unresolved.append(category)

        if mine_unresolved:
            for category in unresolved:
                mined = await self.mine(session, category)
                if mined:
                    selectors[category] = mined

        self.history.append({"timestamp": now_timestamp(), "selectors": selectors.to_dict()})
        missing = [category.value for category in Category if selectors[category] is None]
        if missing:
            logger.warning(f"No working selector for: {', '.join(missing)}")
        logger.info(f"Selectors resolved: {selectors.to_dict()}")
        return selectors

    async def mine(self: "SelectorResolver", session: DocumentSession, category: Category | str) -> str | None:
        """Look for new selectors for a category whose known candidates all fail.

        Every mined selector is added to the catalog, so it survives as a
        fallback even if mining never runs again.

        Returns:
            The selector synthesized from the first matching element, or None
        """
        category = Category.parse(category)
        logger.info(f"Mining new selectors for {category.value}")
        found = await session.evaluate(_mine_candidates, category.value, settings.MAX_MINED_CANDIDATES)
        if not found:
            logger.info(f"No new selector found for {category.value}")
            return None

        self.catalog.add_candidates(category, [item["selector"] for item in found])
        logger.info(f"Found {len(found)} new candidates for {category.value}")
        return found[0]["selector"]

    def get_resolution_details(self: "SelectorResolver") -> dict[str, list[dict[str, Any]]]:
        """Working candidates of the last resolution with their scores.

        Useful for understanding why a selector was chosen over another.
        """
        return {
            category.value: [
                {
                    "pattern": candidate.pattern,
                    "priority": candidate.priority,
                    "match_count": candidate.match_count,
                    "sample_text": candidate.sample_text,
                }
                for candidate in candidates
            ]
            for category, candidates in self.last_candidates.items()
        }
