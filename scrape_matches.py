import asyncio
import logging
import sys

from core import settings
from match_scraper import AdaptiveMatchScraper, NavigationError
from match_scraper.browser import open_document


async def scrape(url: str) -> int:
    scraper = AdaptiveMatchScraper()
    scraper.load_history()

    async with open_document() as session:
        try:
            await session.navigate(url)
        except NavigationError as e:
            print(f"Error: {e}")
            return 1
        await session.wait(settings.INITIAL_SETTLE_MS)

        details = await scraper.extract_with_details(session)
        records = details["records"]
        if not records:
            print("\nNo matches found, validating selectors...")
            result = await scraper.run_with_recovery(session, url)
            scraper.save_report(result)
            if result.succeeded:
                records = await scraper.extract_records(session)

    scraper.save_history()

    print("\n" + "-" * 70)
    print("Selectors")
    print("-" * 70)
    # Recovery may have replaced selectors after the first extraction.
    for category, pattern in scraper.selectors.to_dict().items():
        print(f"  {category:<12} {pattern}")

    print("\n" + "-" * 70)
    print(f"Matches ({len(records)})")
    print("-" * 70)
    if scraper.extractor.last_used_fallback:
        print("  (cards found by layout heuristic)")
    for record in records:
        score = f"{record.home_score} - {record.away_score}" if record.home_score else "x"
        print(f"  [{record.kickoff_time or '--:--'}] {record.home_team} {score} {record.away_team}")
        if record.competition:
            print(f"      {record.competition} {record.status}".rstrip())
    return 0 if records else 1


def main():
    """Scrape today's matches, recovering selectors if the page changed."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    url = sys.argv[1] if len(sys.argv) > 1 else settings.DEFAULT_URL

    print("=" * 70)
    print("ADAPTIVE MATCH SCRAPER")
    print("=" * 70)
    print(f"URL: {url}")

    sys.exit(asyncio.run(scrape(url)))


if __name__ == "__main__":
    main()
