import asyncio
import logging
import sys

from core import settings
from match_scraper import AdaptiveMatchScraper, NavigationError, RecoveryOptions
from match_scraper.browser import open_document


async def validate(url: str, max_attempts: int) -> int:
    scraper = AdaptiveMatchScraper(options=RecoveryOptions(max_attempts=max_attempts))
    if not scraper.load_history():
        print("No history found, starting from the default catalog")

    async with open_document() as session:
        try:
            await session.navigate(url)
        except NavigationError as e:
            print(f"Error: {e}")
            return 1
        await session.wait(settings.INITIAL_SETTLE_MS)

        if not any(scraper.selectors.values()):
            await scraper.resolve_selectors(session)
        result = await scraper.run_with_recovery(session, url)

    scraper.save_history()
    report_path = scraper.save_report(result)

    print("\n" + "-" * 70)
    print("Recovery attempts")
    print("-" * 70)
    for attempt in result.history:
        outcome = "ok" if attempt.succeeded else f"failed{f' ({attempt.error})' if attempt.error else ''}"
        print(f"  {attempt.timestamp}  {attempt.strategy_name:<32} {outcome}")

    metrics = result.metrics
    print("\n" + "-" * 70)
    print("Metrics")
    print("-" * 70)
    print(f"  Validations performed:  {metrics.validations_performed}")
    print(f"  Failures detected:      {metrics.failures_detected}")
    print(f"  Successful recoveries:  {metrics.successful_recoveries}")
    print(f"  Validation time:        {metrics.total_validation_seconds:.2f}s")
    for name, count in metrics.strategy_invocations.items():
        print(f"  {name:<32} {count}")

    print("\n" + "=" * 70)
    print(f"{'HEALTHY' if result.succeeded else 'EXHAUSTED'} after {result.attempts} attempt(s)")
    print(f"Report: {report_path}")
    print("=" * 70)
    return 0 if result.succeeded else 1


def main():
    """Validate stored selectors against the live page and recover broken ones."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    url = sys.argv[1] if len(sys.argv) > 1 else settings.DEFAULT_URL
    max_attempts = int(sys.argv[2]) if len(sys.argv) > 2 else settings.DEFAULT_MAX_ATTEMPTS

    print("=" * 70)
    print("SELECTOR VALIDATION WITH AUTOMATIC RECOVERY")
    print("=" * 70)
    print(f"URL: {url}")
    print(f"Max attempts: {max_attempts}")

    sys.exit(asyncio.run(validate(url, max_attempts)))


if __name__ == "__main__":
    main()
