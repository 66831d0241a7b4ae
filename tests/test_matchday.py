"""Tests for the matchday spider and pipeline."""

import pytest
from scrapy.exceptions import DropItem
from scrapy.http import HtmlResponse

from matchday.items import MatchItem
from matchday.pipelines import MatchPipeline
from matchday.spiders.match_spider import MatchSpider
from tests.pages import MATCHES_V1


class TestMatchSpider:
    @pytest.mark.asyncio
    async def test_yields_one_item_per_match(self):
        spider = MatchSpider()
        response = HtmlResponse(
            url="https://example.com/jogos",
            body=MATCHES_V1.encode("utf-8"),
            encoding="utf-8",
        )

        items = [item async for item in spider.parse(response)]

        assert len(items) == 3
        assert items[0]["home_team"] == "Flamengo"
        assert items[0]["away_team"] == "Palmeiras"
        assert items[0]["competition"] == "Brasileirão Série A"
        assert items[2]["source_url"] == "https://example.com/jogos"


class TestMatchPipeline:
    def item(self, **fields):
        return MatchItem({"home_team": "Bahia", "away_team": "Vitória", "kickoff_time": "16:00", **fields})

    def test_strips_whitespace(self):
        item = MatchPipeline().process_item(self.item(home_team="  Bahia \n"), spider=None)
        assert item["home_team"] == "Bahia"

    def test_drops_duplicates(self):
        pipeline = MatchPipeline()
        pipeline.process_item(self.item(), spider=None)

        with pytest.raises(DropItem):
            pipeline.process_item(self.item(home_team=" Bahia "), spider=None)

    def test_same_teams_other_kickoff_is_kept(self):
        pipeline = MatchPipeline()
        pipeline.process_item(self.item(), spider=None)
        assert pipeline.process_item(self.item(kickoff_time="20:00"), spider=None)
