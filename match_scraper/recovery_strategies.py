"""Recovery strategies tried, in order, when validation fails.

Each strategy inspects or mutates the shared RecoveryContext and reports
whether it believes it made progress. Strategies may raise DocumentError or
TimeoutError; the engine records those as failed attempts.
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import soupsieve
from bs4 import BeautifulSoup, Tag

from core import settings

from .categories import Category
from .document import DocumentSession
from .dom import (
    CLOCK_ONLY_RE,
    CLOCK_RE,
    DIGITS_ONLY_RE,
    SHORT_NUMBER_RE,
    VERSUS_RE,
    class_list,
    clean_text,
    document_fingerprint,
    element_children,
    has_card_class,
    has_text_children,
    inner_text,
    select_safe,
)
from .exceptions import ConfigurationError
from .models import ResolvedSelectorSet
from .selector_catalog import SelectorCatalog
from .selector_resolver import SelectorResolver
from .selector_validator import SelectorValidator

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^h[1-6]$")


class StrategyName(str, Enum):
    RELOAD_PAGE = "reload-page"
    RE_DETECT_SELECTORS = "re-detect-selectors"
    TRY_ALTERNATIVE_CATALOG_ENTRIES = "try-alternative-catalog-entries"
    EXTRACT_BY_TEXT_HEURISTICS = "extract-by-text-heuristics"
    ANALYZE_DOM_STRUCTURE = "analyze-dom-structure"


DEFAULT_STRATEGY_ORDER: tuple[StrategyName, ...] = (
    StrategyName.RELOAD_PAGE,
    StrategyName.RE_DETECT_SELECTORS,
    StrategyName.TRY_ALTERNATIVE_CATALOG_ENTRIES,
    StrategyName.EXTRACT_BY_TEXT_HEURISTICS,
    StrategyName.ANALYZE_DOM_STRUCTURE,
)


@dataclass
class RecoveryOptions:
    """Recovery configuration. Invalid values raise ConfigurationError."""

    max_attempts: int = settings.DEFAULT_MAX_ATTEMPTS
    validation_timeout_ms: int = settings.VALIDATION_TIMEOUT_MS
    navigation_timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS
    attempt_delay_ms: int = settings.ATTEMPT_DELAY_MS
    reload_settle_ms: int = settings.RELOAD_SETTLE_MS
    wait_policy: str = settings.DEFAULT_WAIT_POLICY
    strategy_order: tuple[StrategyName, ...] = DEFAULT_STRATEGY_ORDER

    def __post_init__(self: "RecoveryOptions") -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")
        for name in ("validation_timeout_ms", "navigation_timeout_ms", "attempt_delay_ms", "reload_settle_ms"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        self.strategy_order = tuple(parse_strategy_name(name) for name in self.strategy_order)
        if not self.strategy_order:
            raise ConfigurationError("strategy_order must name at least one strategy")

    def to_dict(self: "RecoveryOptions") -> dict[str, Any]:
        return {
            "max_attempts": self.max_attempts,
            "validation_timeout_ms": self.validation_timeout_ms,
            "navigation_timeout_ms": self.navigation_timeout_ms,
            "attempt_delay_ms": self.attempt_delay_ms,
            "reload_settle_ms": self.reload_settle_ms,
            "wait_policy": self.wait_policy,
            "strategy_order": [name.value for name in self.strategy_order],
        }


def parse_strategy_name(name: StrategyName | str) -> StrategyName:
    try:
        return StrategyName(name)
    except ValueError:
        raise ConfigurationError(f"Unknown recovery strategy: {name!r}") from None


@dataclass
class RecoveryContext:
    """Everything a strategy may read or change during one recovery run."""

    session: DocumentSession
    url: str | None
    catalog: SelectorCatalog
    resolver: SelectorResolver
    validator: SelectorValidator
    selectors: ResolvedSelectorSet
    options: RecoveryOptions
    failing_categories: list[Category] = field(default_factory=list)


class RecoveryStrategy(ABC):
    name: StrategyName

    @abstractmethod
    async def attempt(self: "RecoveryStrategy", context: RecoveryContext) -> bool:
        """Try to repair the selector set. True if something changed for the better."""


class ReloadPage(RecoveryStrategy):
    """Reload and wait, for transient rendering problems.

    Progress means the page structure actually changed; a reload that
    serves the identical DOM leaves nothing new to validate.
    """

    name = StrategyName.RELOAD_PAGE

    async def attempt(self: "ReloadPage", context: RecoveryContext) -> bool:
        session = context.session
        options = context.options
        before = await session.evaluate(document_fingerprint)

        if session.url is None and context.url:
            await session.navigate(context.url, options.wait_policy, options.navigation_timeout_ms)
        else:
            await session.reload(options.wait_policy, options.navigation_timeout_ms)
        await session.wait(options.reload_settle_ms)

        after = await session.evaluate(document_fingerprint)
        if after == before:
            logger.info("Reload served an identical page structure")
            return False
        logger.info("Page reloaded with a different structure")
        return True


class ReDetectSelectors(RecoveryStrategy):
    name = StrategyName.RE_DETECT_SELECTORS

    async def attempt(self: "ReDetectSelectors", context: RecoveryContext) -> bool:
        before = context.selectors.copy()
        await context.resolver.resolve(context.session, into=context.selectors)
        changed = context.selectors.changed_categories(before)
        if changed:
            logger.info(f"New selectors detected for: {', '.join(c.value for c in changed)}")
            return True
        logger.info("No new selectors detected")
        return False


class TryAlternativeCatalogEntries(RecoveryStrategy):
    """Walk the catalog for each failing category until a pattern validates."""

    name = StrategyName.TRY_ALTERNATIVE_CATALOG_ENTRIES

    async def attempt(self: "TryAlternativeCatalogEntries", context: RecoveryContext) -> bool:
        fixed = 0
        for category in context.failing_categories:
            current = context.selectors[category]
            for pattern in context.catalog.candidates_for(category):
                if pattern == current:
                    continue
                if await context.validator.validate_selector(context.session, category, pattern):
                    context.selectors[category] = pattern
                    logger.info(f"Alternative selector works for {category.value}: {pattern}")
                    fixed += 1
                    break
        return fixed > 0


TEXT_BUCKETS = (Category.KICKOFF_TIME, Category.SCORE, Category.TEAM_NAME, Category.COMPETITION)


def _classify_text_elements(root: BeautifulSoup) -> dict[str, list[list[str]]]:
    """Bucket leaf text elements by what their text looks like; keep their classes."""
    buckets: dict[str, list[list[str]]] = {category.value: [] for category in TEXT_BUCKETS}
    for element in root.find_all(True):
        if has_text_children(element):
            continue
        text = clean_text(element.get_text(" "))
        if not text or len(text) > settings.TEXT_HEURISTIC_MAX_LENGTH:
            continue
        classes = class_list(element)

        if CLOCK_ONLY_RE.match(text):
            buckets[Category.KICKOFF_TIME.value].append(classes)
        elif SHORT_NUMBER_RE.match(text):
            buckets[Category.SCORE.value].append(classes)
        elif (
            settings.TEAM_NAME_MIN_LENGTH < len(text) < settings.TEAM_NAME_MAX_LENGTH
            and not CLOCK_RE.search(text)
            and not DIGITS_ONLY_RE.match(text)
            and not VERSUS_RE.search(text)
        ):
            buckets[Category.TEAM_NAME.value].append(classes)

        if (HEADING_RE.match(element.name) or any("title" in cls for cls in classes)) and len(
            text
        ) > settings.COMPETITION_MIN_LENGTH:
            buckets[Category.COMPETITION.value].append(classes)
    return buckets


def majority_classes(members: Iterable[Iterable[str]]) -> list[str]:
    """Classes carried by at least half of the members, most common first.

    Very short class names are utility noise and are not voted on.
    """
    members = list(members)
    if not members:
        return []
    counts: Counter[str] = Counter()
    for classes in members:
        counts.update({cls for cls in classes if len(cls) >= settings.MIN_VOTED_CLASS_LENGTH})
    threshold = math.ceil(len(members) * settings.MAJORITY_CLASS_RATIO)
    return [cls for cls, count in counts.most_common() if count >= threshold]


class ExtractByTextHeuristics(RecoveryStrategy):
    """Derive selectors from classes shared by elements whose text looks like a field."""

    name = StrategyName.EXTRACT_BY_TEXT_HEURISTICS

    async def attempt(self: "ExtractByTextHeuristics", context: RecoveryContext) -> bool:
        buckets = await context.session.evaluate(_classify_text_elements)
        installed = {}
        for category in TEXT_BUCKETS:
            common = majority_classes(buckets.get(category.value, []))
            if not common:
                continue
            selector = f".{soupsieve.escape(common[0])}"
            if selector == context.selectors[category]:
                continue
            context.catalog.add_candidates(category, [selector])
            context.selectors[category] = selector
            installed[category.value] = selector

        if installed:
            logger.info(f"Selectors derived from text: {installed}")
            return True
        logger.info("Could not derive selectors from text")
        return False


def _looks_like_card_structure(element: Tag) -> bool:
    if not has_card_class(element):
        return False
    if len(element_children(element)) < settings.STRUCTURE_MIN_CHILDREN:
        return False
    text = inner_text(element)[:100]
    return bool(VERSUS_RE.search(text) or CLOCK_RE.search(text))


def _find_card_structure(root: BeautifulSoup, max_depth: int) -> dict[str, Any] | None:
    """Depth-bounded walk of the page containers looking for a match-card subtree.

    Uses an explicit stack; an element is re-entered only when reached with
    more remaining depth than before, so the walk always terminates.
    """
    remaining_seen: dict[int, int] = {}
    for container in select_safe(root, settings.STRUCTURE_CONTAINER_SELECTOR):
        stack: list[tuple[Tag, int, list[str]]] = [(container, 0, [container.name])]
        while stack:
            element, depth, path = stack.pop()
            remaining = max_depth - depth
            if remaining_seen.get(id(element), -1) >= remaining:
                continue
            remaining_seen[id(element)] = remaining

            if _looks_like_card_structure(element):
                classes = class_list(element)
                return {"classes": classes, "path": path, "text": inner_text(element)[:100]}

            if depth < max_depth:
                for child in reversed(element_children(element)):
                    stack.append((child, depth + 1, [*path, child.name]))
    return None


def selector_from_structure(found: dict[str, Any]) -> str:
    if found["classes"]:
        return f".{soupsieve.escape(found['classes'][0])}"
    return " > ".join(found["path"])


class AnalyzeDomStructure(RecoveryStrategy):
    name = StrategyName.ANALYZE_DOM_STRUCTURE

    async def attempt(self: "AnalyzeDomStructure", context: RecoveryContext) -> bool:
        found = await context.session.evaluate(_find_card_structure, settings.STRUCTURE_MAX_DEPTH)
        if not found:
            logger.info("No structural card pattern found")
            return False

        selector = selector_from_structure(found)
        if selector == context.selectors[Category.CARD]:
            logger.info(f"Structural card pattern is already in use: {selector}")
            return False

        context.catalog.add_candidates(Category.CARD, [selector])
        context.selectors[Category.CARD] = selector
        logger.info(f"Card selector derived from DOM structure: {selector}")
        return True


STRATEGIES: dict[StrategyName, type[RecoveryStrategy]] = {
    StrategyName.RELOAD_PAGE: ReloadPage,
    StrategyName.RE_DETECT_SELECTORS: ReDetectSelectors,
    StrategyName.TRY_ALTERNATIVE_CATALOG_ENTRIES: TryAlternativeCatalogEntries,
    StrategyName.EXTRACT_BY_TEXT_HEURISTICS: ExtractByTextHeuristics,
    StrategyName.ANALYZE_DOM_STRUCTURE: AnalyzeDomStructure,
}


def build_strategies(order: Iterable[StrategyName | str]) -> list[RecoveryStrategy]:
    return [STRATEGIES[parse_strategy_name(name)]() for name in order]
