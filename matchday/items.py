# Define here the models for your scraped items
#
# See documentation in:
# https://docs.scrapy.org/en/latest/topics/items.html

import scrapy


class MatchItem(scrapy.Item):
    """One match read from the matches page."""

    home_team: str = scrapy.Field()
    away_team: str = scrapy.Field()
    kickoff_time: str | None = scrapy.Field()
    status: str | None = scrapy.Field()
    home_score: str | None = scrapy.Field()
    away_score: str | None = scrapy.Field()
    competition: str | None = scrapy.Field()
    tier: str | None = scrapy.Field()
    source_url: str = scrapy.Field()
    scraped_at: str = scrapy.Field()
