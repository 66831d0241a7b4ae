import asyncio
import logging
from collections.abc import Iterable, Mapping

from .categories import Category
from .document import DocumentSession
from .exceptions import DocumentError
from .models import Metrics, RecoveryAttempt, RecoveryResult, ResolvedSelectorSet, now_timestamp
from .recovery_strategies import (
    RecoveryContext,
    RecoveryOptions,
    RecoveryStrategy,
    StrategyName,
    build_strategies,
)
from .selector_catalog import SelectorCatalog
from .selector_resolver import SelectorResolver
from .selector_validator import SelectorValidator

logger = logging.getLogger(__name__)


class RecoveryEngine:
    """Drives the validate / recover cycle until selectors work again.

    Works by:
    1. Validating every category of the resolved selector set
    2. On failure, trying the strategies in order until one reports progress
    3. Re-validating after progress, or waiting and starting a new cycle
       when no strategy helped
    4. Giving up after ``max_attempts`` cycles with the full attempt history

    Each cycle invokes every strategy at most once, so a run never makes more
    than ``max_attempts * len(strategies)`` strategy invocations.
    """

    def __init__(
        self: "RecoveryEngine",
        catalog: SelectorCatalog,
        resolver: SelectorResolver | None = None,
        validator: SelectorValidator | None = None,
        options: RecoveryOptions | None = None,
        strategies: Iterable[RecoveryStrategy] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: Candidate selectors shared with the resolver
            resolver: Resolver used by re-detection. Built over ``catalog`` if omitted.
            validator: Validator whose metrics the engine updates. Built from
                ``options`` if omitted.
            options: Recovery configuration
            strategies: Strategy instances to use instead of ``options.strategy_order``
        """
        self.options = options if options is not None else RecoveryOptions()
        self.catalog = catalog
        self.resolver = resolver if resolver is not None else SelectorResolver(catalog)
        self.validator = (
            validator
            if validator is not None
            else SelectorValidator(Metrics(), timeout_ms=self.options.validation_timeout_ms)
        )
        if strategies is None:
            self.strategies = build_strategies(self.options.strategy_order)
        else:
            self.strategies = list(strategies)
        self.history: list[RecoveryAttempt] = []

    @property
    def metrics(self: "RecoveryEngine") -> Metrics:
        return self.validator.metrics

    async def run(
        self: "RecoveryEngine",
        session: DocumentSession,
        selectors: Mapping[Category, str | None],
        url: str | None = None,
    ) -> RecoveryResult:
        """Validate and recover until healthy or out of attempts.

        A ResolvedSelectorSet passed in is repaired in place.

        Args:
            session: Document the selectors are validated against
            selectors: Currently resolved selectors
            url: Page to navigate to if the session has none loaded yet

        Returns:
            The outcome with this run's attempt history. Exhaustion is a
            result with ``succeeded=False``, not an exception.
        """
        if not isinstance(selectors, ResolvedSelectorSet):
            selectors = ResolvedSelectorSet(selectors)
        max_attempts = self.options.max_attempts
        history: list[RecoveryAttempt] = []
        context = RecoveryContext(
            session=session,
            url=url,
            catalog=self.catalog,
            resolver=self.resolver,
            validator=self.validator,
            selectors=selectors,
            options=self.options,
        )

        progressed = False
        for attempt in range(1, max_attempts + 1):
            logger.info(f"Validation cycle {attempt}/{max_attempts}")
            report = await self.validator.validate_all(session, selectors)
            if report.healthy:
                return self._finish(True, attempt, history, selectors, recovered=progressed)

            context.failing_categories = list(report.failed_categories)
            progressed = await self._run_strategies(context, history)
            if not progressed and attempt < max_attempts:
                logger.info(f"No strategy made progress, waiting {self.options.attempt_delay_ms}ms")
                await session.wait(self.options.attempt_delay_ms)

        if progressed:
            report = await self.validator.validate_all(session, selectors)
            if report.healthy:
                return self._finish(True, max_attempts, history, selectors, recovered=True)

        logger.error(f"Recovery exhausted after {max_attempts} attempts")
        return self._finish(False, max_attempts, history, selectors)

    async def _run_strategies(self: "RecoveryEngine", context: RecoveryContext, history: list[RecoveryAttempt]) -> bool:
        """One recovery pass. Stops at the first strategy that reports progress."""
        for strategy in self.strategies:
            name = StrategyName(strategy.name).value
            self.metrics.count_strategy(name)
            logger.info(f"Trying strategy: {name}")

            error = None
            try:
                succeeded = await strategy.attempt(context)
            except (DocumentError, asyncio.TimeoutError) as e:
                succeeded = False
                error = str(e) or type(e).__name__
                logger.warning(f"Strategy {name} failed: {error}")

            record = RecoveryAttempt(strategy_name=name, timestamp=now_timestamp(), succeeded=succeeded, error=error)
            history.append(record)
            self.history.append(record)
            if succeeded:
                logger.info(f"Strategy {name} made progress")
                return True
        return False

    def _finish(
        self: "RecoveryEngine",
        succeeded: bool,
        attempts: int,
        history: list[RecoveryAttempt],
        selectors: ResolvedSelectorSet,
        recovered: bool = False,
    ) -> RecoveryResult:
        if recovered:
            self.metrics.successful_recoveries += 1
            logger.info(f"Selectors recovered after {attempts} attempts")
        elif succeeded:
            logger.info("Selectors healthy, no recovery needed")
        return RecoveryResult(
            succeeded=succeeded,
            attempts=attempts,
            history=tuple(history),
            metrics=self.metrics,
            selectors=selectors,
        )
