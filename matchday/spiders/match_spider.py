from datetime import datetime

import scrapy

from core import settings
from match_scraper import AdaptiveMatchScraper, StaticDocument
from matchday.items import MatchItem

FORMAT_DT = "%Y%m%d.%H.%M.%S"
NOW = datetime.now().strftime(FORMAT_DT)


class MatchSpider(scrapy.Spider):
    """Spider to scrape today's matches with adaptive selectors.

    The fetched HTML carries no layout, so only selector and text
    extraction apply here; the size-based card fallback needs a browser.
    """

    name = "match_spider"
    start_urls = [settings.DEFAULT_URL]
    custom_settings = {
        "FEEDS": {
            f"output/matches_{NOW}.json": {"format": "json", "overwrite": True},
        },
        "ITEM_PIPELINES": {"matchday.pipelines.MatchPipeline": 300},
    }

    def __init__(self, use_history="false", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_history = use_history.lower() == "true"

    async def parse(self, response):
        """Resolve selectors on the response and yield one item per match."""
        scraper = AdaptiveMatchScraper()
        if self.use_history:
            scraper.load_history()

        session = StaticDocument(response.text, url=response.url)
        await scraper.resolve_selectors(session)
        records = await scraper.extract_records(session)
        self.logger.info(f"Extracted {len(records)} matches from {response.url}")

        scraped_at = datetime.now().isoformat()
        for record in records:
            yield MatchItem(
                {
                    **record.to_dict(),
                    "source_url": response.url,
                    "scraped_at": scraped_at,
                }
            )
