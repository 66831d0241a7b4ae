import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from core import settings

from .categories import Category
from .document import DocumentSession
from .history_store import HistoryStore
from .models import MatchRecord, Metrics, RecoveryResult, ResolvedSelectorSet, SessionHistory, ValidationReport
from .record_extractor import RecordExtractor
from .recovery_engine import RecoveryEngine
from .recovery_strategies import RecoveryOptions, RecoveryStrategy
from .selector_catalog import SelectorCatalog
from .selector_resolver import SelectorResolver
from .selector_validator import SelectorValidator

logger = logging.getLogger(__name__)


class AdaptiveMatchScraper:
    """Adaptive match extractor for a page whose markup changes without notice.

    Finds the selector that currently works for each match field instead of
    relying on fixed CSS classes, and repairs them when the site changes.

    Features:
    - Ranks known selectors against the live page and mines new ones
    - Falls back to text patterns per field when a selector finds nothing
    - Validates selectors and runs recovery strategies when they break
    - Remembers what worked between runs

    One instance holds the state of one document session. Use separate
    instances for concurrent sessions.
    """

    def __init__(
        self: "AdaptiveMatchScraper",
        catalog: SelectorCatalog | None = None,
        options: RecoveryOptions | None = None,
        history_store: HistoryStore | None = None,
        strategies: Iterable[RecoveryStrategy] | None = None,
    ) -> None:
        """Initialize the AdaptiveMatchScraper.

        Args:
            catalog: Candidate selectors. Defaults to the site-tuned catalog.
            options: Recovery configuration
            history_store: Where learned selectors are loaded from and saved to
            strategies: Recovery strategy instances overriding ``options.strategy_order``
        """
        self.catalog = catalog if catalog is not None else SelectorCatalog()
        self.options = options if options is not None else RecoveryOptions()
        self.history_store = history_store if history_store is not None else HistoryStore()
        self.metrics = Metrics()
        self.selectors = ResolvedSelectorSet()
        self.resolver = SelectorResolver(self.catalog)
        self.extractor = RecordExtractor()
        self.validator = SelectorValidator(self.metrics, timeout_ms=self.options.validation_timeout_ms)
        self.engine = RecoveryEngine(
            self.catalog,
            resolver=self.resolver,
            validator=self.validator,
            options=self.options,
            strategies=strategies,
        )
        self.loaded_validation_history: list[dict[str, Any]] = []

    async def resolve_selectors(self: "AdaptiveMatchScraper", session: DocumentSession) -> ResolvedSelectorSet:
        """Resolve the best selector per category and keep it as the session's set."""
        return await self.resolver.resolve(session, into=self.selectors)

    async def extract_records(
        self: "AdaptiveMatchScraper",
        session: DocumentSession,
        selectors: Mapping[Category, str | None] | None = None,
    ) -> list[MatchRecord]:
        return await self.extractor.extract(session, self.selectors if selectors is None else selectors)

    async def validate(
        self: "AdaptiveMatchScraper",
        session: DocumentSession,
        selectors: Mapping[Category, str | None] | None = None,
    ) -> ValidationReport:
        return await self.validator.validate_all(session, self.selectors if selectors is None else selectors)

    async def run_with_recovery(
        self: "AdaptiveMatchScraper",
        session: DocumentSession,
        url: str | None = None,
    ) -> RecoveryResult:
        """Validate the session's selectors and recover them if they broke.

        Returns:
            RecoveryResult with success flag, attempts used, the attempt
            history and the metrics
        """
        return await self.engine.run(session, self.selectors, url)

    async def extract_with_details(self: "AdaptiveMatchScraper", session: DocumentSession) -> dict[str, Any]:
        """Resolve and extract with debugging information.

        Useful for understanding why selectors were picked and whether the
        card fallback kicked in.

        Returns:
            {
                'records': List[MatchRecord],
                'selectors': Dict,
                'resolution_details': Dict,
                'card_count': int,
                'used_fallback': bool,
                'extracted_count': int,
            }
        """
        await self.resolve_selectors(session)
        records = await self.extract_records(session)
        return {
            "records": records,
            "selectors": self.selectors.to_dict(),
            "resolution_details": self.resolver.get_resolution_details(),
            "card_count": self.extractor.last_card_count,
            "used_fallback": self.extractor.last_used_fallback,
            "extracted_count": len(records),
        }

    def load_history(self: "AdaptiveMatchScraper") -> bool:
        """Restore selectors and learned catalog entries from the latest history.

        Returns:
            True if a history was found
        """
        history = self.history_store.load_latest()
        if history is None:
            return False

        self.catalog = SelectorCatalog.from_snapshot(history.catalog_snapshot)
        self.resolver.catalog = self.catalog
        self.engine.catalog = self.catalog
        # Update in place: the engine and strategies hold this same set.
        self.selectors.update(history.resolved_selectors)
        self.resolver.history = history.resolution_history + self.resolver.history
        self.loaded_validation_history = history.validation_history
        return True

    def build_history(self: "AdaptiveMatchScraper") -> SessionHistory:
        """Snapshot of the session, keeping the newest HISTORY_MAX_ENTRIES per list."""
        limit = max(settings.HISTORY_MAX_ENTRIES, 1)
        validation_history = self.loaded_validation_history + [entry.to_dict() for entry in self.validator.history]
        return SessionHistory(
            resolved_selectors=self.selectors.copy(),
            catalog_snapshot=self.catalog.snapshot(),
            validation_history=validation_history[-limit:],
            resolution_history=list(self.resolver.history)[-limit:],
        )

    def save_history(self: "AdaptiveMatchScraper") -> Path:
        return self.history_store.save(self.build_history())

    def save_report(self: "AdaptiveMatchScraper", result: RecoveryResult) -> Path:
        return self.history_store.save_report(
            result,
            options=self.options.to_dict(),
            validation_history=[entry.to_dict() for entry in self.validator.history],
        )
