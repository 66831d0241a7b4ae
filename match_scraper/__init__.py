"""
Match Scraper - adaptive extraction of football matches

Resolves which CSS selector currently identifies each match field, extracts
records with text fallbacks, validates the selectors and recovers them
automatically when the page markup changes.
"""

from .adaptive_scraper import AdaptiveMatchScraper
from .categories import DEFAULT_PATTERNS, Category
from .document import DocumentSession, StaticDocument
from .exceptions import (
    ConfigurationError,
    DocumentError,
    EvaluationError,
    MatchScraperError,
    NavigationError,
    UnknownCategoryError,
)
from .history_store import HistoryStore
from .models import (
    MatchRecord,
    Metrics,
    RecordMetadata,
    RecoveryAttempt,
    RecoveryResult,
    ResolvedSelectorSet,
    SelectorCandidate,
    SessionHistory,
    ValidationEntry,
    ValidationReport,
)
from .record_extractor import RecordExtractor
from .recovery_engine import RecoveryEngine
from .recovery_strategies import RecoveryContext, RecoveryOptions, RecoveryStrategy, StrategyName
from .selector_catalog import SelectorCatalog
from .selector_resolver import SelectorResolver
from .selector_validator import SelectorValidator

__all__ = [
    "AdaptiveMatchScraper",
    "Category",
    "ConfigurationError",
    "DEFAULT_PATTERNS",
    "DocumentError",
    "DocumentSession",
    "EvaluationError",
    "HistoryStore",
    "MatchRecord",
    "MatchScraperError",
    "Metrics",
    "NavigationError",
    "RecordExtractor",
    "RecordMetadata",
    "RecoveryAttempt",
    "RecoveryContext",
    "RecoveryEngine",
    "RecoveryOptions",
    "RecoveryResult",
    "RecoveryStrategy",
    "ResolvedSelectorSet",
    "SelectorCandidate",
    "SelectorCatalog",
    "SelectorResolver",
    "SelectorValidator",
    "SessionHistory",
    "StaticDocument",
    "StrategyName",
    "UnknownCategoryError",
    "ValidationEntry",
    "ValidationReport",
]
