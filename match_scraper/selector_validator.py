import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

from core import settings

from .categories import Category
from .document import DocumentSession
from .dom import format_element, is_valid_selector, select_safe
from .exceptions import DocumentError
from .models import Metrics, ValidationEntry, ValidationReport, now_timestamp

logger = logging.getLogger(__name__)


def _probe_selector(root: BeautifulSoup, pattern: str, sample_size: int) -> dict[str, Any]:
    if not is_valid_selector(pattern):
        return {"count": 0, "samples": [], "error": f"Invalid selector: {pattern}"}
    matches = select_safe(root, pattern)
    return {"count": len(matches), "samples": [format_element(el) for el in matches[:sample_size]], "error": None}


class SelectorValidator:
    """Re-checks that resolved selectors still match something.

    Reports are pure functions of the document and the selectors; only the
    metrics counters and the validation history accumulate.
    """

    def __init__(
        self: "SelectorValidator",
        metrics: Metrics | None = None,
        timeout_ms: int = settings.VALIDATION_TIMEOUT_MS,
    ) -> None:
        """Initialize the validator.

        Args:
            metrics: Counters shared with the recovery engine
            timeout_ms: Upper bound for a single selector re-query
        """
        self.metrics = metrics if metrics is not None else Metrics()
        self.timeout_ms = timeout_ms
        self.history: list[ValidationEntry] = []

    async def validate_selector(
        self: "SelectorValidator",
        session: DocumentSession,
        category: Category | str,
        pattern: str | None,
    ) -> bool:
        """Re-query one pattern. True iff it is valid and matches at least one element."""
        category = Category.parse(category)
        self.metrics.validations_performed += 1

        if not pattern:
            self.metrics.failures_detected += 1
            logger.warning(f"No selector defined for {category.value}")
            return False

        started = time.monotonic()
        try:
            probe = await asyncio.wait_for(
                session.evaluate(_probe_selector, pattern, settings.VALIDATION_SAMPLE_SIZE),
                timeout=self.timeout_ms / 1000,
            )
        except (DocumentError, asyncio.TimeoutError) as e:
            probe = {"count": 0, "samples": [], "error": str(e) or type(e).__name__}
        duration = time.monotonic() - started
        self.metrics.total_validation_seconds += duration

        entry = ValidationEntry(
            category=category.value,
            pattern=pattern,
            match_count=probe["count"],
            duration=round(duration, 4),
            timestamp=now_timestamp(),
            samples=tuple(probe["samples"]),
            error=probe["error"],
        )
        self.history.append(entry)

        if not entry.succeeded:
            self.metrics.failures_detected += 1
            logger.warning(f"Validation failed for {category.value}: {pattern} ({entry.error or 'no matches'})")
            return False

        logger.debug(f"Validation passed for {category.value}: {entry.match_count} elements")
        return True

    async def validate_all(
        self: "SelectorValidator",
        session: DocumentSession,
        selectors: Mapping[Category, str | None],
    ) -> ValidationReport:
        """Validate every category of a resolved selector set."""
        logger.info("Validating all selectors...")
        results = {}
        for category in Category:
            results[category] = await self.validate_selector(session, category, selectors.get(category))

        report = ValidationReport.from_results(results)
        if report.healthy:
            logger.info("All selectors validated")
        else:
            logger.warning(f"Failing categories: {', '.join(c.value for c in report.failed_categories)}")
        return report
