"""Tests for selector resolution and mining."""

import pytest
from bs4 import BeautifulSoup

from match_scraper import Category, SelectorCatalog, SelectorResolver, StaticDocument
from match_scraper.selector_resolver import score_pattern
from tests.pages import MATCHES_V1


class TestScorePattern:
    def test_specific_patterns_outrank_generic_ones(self):
        assert score_pattern('[class*="score"]', 2) > score_pattern(".score", 2)
        assert score_pattern("ul.List_items__x1 > li", 1) > score_pattern("li", 3)
        assert score_pattern("ul > li", 1) > score_pattern("li", 1)


class TestResolve:
    @pytest.mark.asyncio
    async def test_every_present_category_resolves(self, v1_document):
        resolver = SelectorResolver(SelectorCatalog())
        selectors = await resolver.resolve(v1_document)

        assert selectors.unresolved() == []

    @pytest.mark.asyncio
    async def test_resolved_selectors_pick_cards_and_team_names(self, v1_document):
        resolver = SelectorResolver(SelectorCatalog())
        selectors = await resolver.resolve(v1_document)

        soup = BeautifulSoup(MATCHES_V1, "html.parser")
        assert soup.select(selectors[Category.CARD]) == soup.select("li.MatchCard")
        assert soup.select(selectors[Category.TEAM_NAME]) == soup.select("span.TeamName")

    @pytest.mark.asyncio
    async def test_prefers_specific_pattern(self, v1_document):
        resolver = SelectorResolver(SelectorCatalog())
        selectors = await resolver.resolve(v1_document)

        assert selectors[Category.CARD] == 'ul[class*="MatchCardsList"] > li'
        assert selectors[Category.SCORE] == '[class*="score"]'

    @pytest.mark.asyncio
    async def test_invalid_candidates_are_skipped(self, v1_document):
        catalog = SelectorCatalog({Category.CARD: ["li[", "li.MatchCard"]})
        selectors = await SelectorResolver(catalog).resolve(v1_document, mine_unresolved=False)

        assert selectors[Category.CARD] == "li.MatchCard"

    @pytest.mark.asyncio
    async def test_empty_page_leaves_everything_unresolved(self, empty_document):
        selectors = await SelectorResolver(SelectorCatalog()).resolve(empty_document)

        assert selectors.unresolved() == list(Category)

    @pytest.mark.asyncio
    async def test_resolution_details(self, v1_document):
        resolver = SelectorResolver(SelectorCatalog())
        await resolver.resolve(v1_document)

        details = resolver.get_resolution_details()
        assert details["card"][0]["pattern"] == 'ul[class*="MatchCardsList"] > li'
        assert details["card"][0]["match_count"] == 3
        assert len(resolver.history) == 1


class TestMine:
    @pytest.mark.asyncio
    async def test_mines_categories_the_catalog_misses(self, v1_document):
        catalog = SelectorCatalog({Category.CARD: ["li.MatchCard"]})
        selectors = await SelectorResolver(catalog).resolve(v1_document)

        assert selectors[Category.TEAM_NAME] == ".TeamName"
        assert selectors[Category.SCORE] == ".score"
        assert selectors[Category.KICKOFF_TIME] == "time"
        assert selectors[Category.STATUS] == ".status"
        assert selectors[Category.COMPETITION] == ".SectionHeader_title"

    @pytest.mark.asyncio
    async def test_mined_selectors_join_the_catalog(self, v1_document):
        catalog = SelectorCatalog({Category.CARD: ["li.MatchCard"]})
        resolver = SelectorResolver(catalog)

        mined = await resolver.mine(v1_document, "teamName")
        assert mined == ".TeamName"
        assert ".TeamName" in catalog.candidates_for(Category.TEAM_NAME)

    @pytest.mark.asyncio
    async def test_mined_selectors_are_tried_first_after_a_resolution(self, v1_document):
        catalog = SelectorCatalog()
        resolver = SelectorResolver(catalog)
        await resolver.resolve(v1_document)

        assert await resolver.mine(v1_document, "teamName") == ".TeamName"
        assert catalog.candidates_for(Category.TEAM_NAME)[0] == ".TeamName"

    @pytest.mark.asyncio
    async def test_nothing_to_mine(self):
        resolver = SelectorResolver(SelectorCatalog())
        catalog_size = resolver.catalog.count(Category.CARD)

        assert await resolver.mine(StaticDocument("<p>nothing here</p>"), Category.CARD) is None
        assert resolver.catalog.count(Category.CARD) == catalog_size
