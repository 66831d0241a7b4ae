import logging
from collections.abc import Iterable, Mapping

from .categories import DEFAULT_PATTERNS, Category

logger = logging.getLogger(__name__)


class SelectorCatalog:
    """Known candidate selectors per category, in trial order.

    The catalog only grows. Patterns that stop matching stay in the tail as
    fallbacks for when the site drifts back; resolution only reorders them.
    """

    def __init__(self: "SelectorCatalog", patterns: Mapping[Category | str, Iterable[str]] | None = None) -> None:
        """Initialize the catalog.

        Args:
            patterns: Initial patterns per category. Defaults to the site-tuned lists.
        """
        source = DEFAULT_PATTERNS if patterns is None else patterns
        self._patterns: dict[Category, list[str]] = {category: [] for category in Category}
        self._preferred: dict[Category, list[str]] = {category: [] for category in Category}
        for key, values in source.items():
            category = Category.parse(key)
            for pattern in values:
                if pattern and pattern not in self._patterns[category]:
                    self._patterns[category].append(pattern)

    def candidates_for(self: "SelectorCatalog", category: Category | str) -> list[str]:
        """Patterns for a category: last preferred order first, then the rest as inserted."""
        category = Category.parse(category)
        preferred = [pattern for pattern in self._preferred[category] if pattern in self._patterns[category]]
        rest = [pattern for pattern in self._patterns[category] if pattern not in preferred]
        return preferred + rest

    def add_candidates(self: "SelectorCatalog", category: Category | str, patterns: Iterable[str]) -> list[str]:
        """Put new patterns at the front of the trial order.

        Returns:
            The patterns that were actually new.
        """
        category = Category.parse(category)
        added = []
        for pattern in patterns:
            if pattern and pattern not in self._patterns[category] and pattern not in added:
                added.append(pattern)
        if added:
            self._patterns[category] = added + self._patterns[category]
            # Fresh patterns outrank the cached order until the next resolution.
            self._preferred[category] = added + self._preferred[category]
            logger.debug(f"Catalog +{len(added)} for {category.value}: {added}")
        return added

    def promote(self: "SelectorCatalog", category: Category | str, ordered_patterns: Iterable[str]) -> None:
        """Remember the resolver's ranking so later trials start with what worked."""
        category = Category.parse(category)
        self.add_candidates(category, [p for p in ordered_patterns if p not in self._patterns[category]])
        self._preferred[category] = [p for p in ordered_patterns if p in self._patterns[category]]

    def preferred(self: "SelectorCatalog", category: Category | str) -> str | None:
        category = Category.parse(category)
        return self._preferred[category][0] if self._preferred[category] else None

    def count(self: "SelectorCatalog", category: Category | str) -> int:
        return len(self._patterns[Category.parse(category)])

    def snapshot(self: "SelectorCatalog") -> dict[str, list[str]]:
        return {category.value: self.candidates_for(category) for category in Category}

    @classmethod
    def from_snapshot(cls: type["SelectorCatalog"], snapshot: Mapping[str, Iterable[str]]) -> "SelectorCatalog":
        """Rebuild a catalog from history: learned patterns first, defaults behind them."""
        merged = {category: list(DEFAULT_PATTERNS[category]) for category in Category}
        for key, patterns in snapshot.items():
            category = Category.parse(key)
            learned = [pattern for pattern in patterns if pattern]
            merged[category] = learned + [pattern for pattern in merged[category] if pattern not in learned]
        return cls(merged)
