"""Tests for record extraction and its text fallbacks."""

import pytest

from match_scraper import AdaptiveMatchScraper, Category, RecordExtractor, ResolvedSelectorSet, StaticDocument

SELECTORS = {
    Category.CARD: "li.MatchCard",
    Category.TEAM_NAME: '[class*="TeamName"]',
    Category.COMPETITION: '[class*="SectionHeader"]',
}


class TestExtract:
    @pytest.mark.asyncio
    async def test_one_record_per_card(self, v1_document):
        scraper = AdaptiveMatchScraper()
        await scraper.resolve_selectors(v1_document)
        records = await scraper.extract_records(v1_document)

        assert [(r.home_team, r.away_team) for r in records] == [
            ("Flamengo", "Palmeiras"),
            ("Santos", "Grêmio"),
            ("Arsenal", "Chelsea"),
        ]

    @pytest.mark.asyncio
    async def test_fields_of_a_finished_match(self, v1_document):
        scraper = AdaptiveMatchScraper()
        await scraper.resolve_selectors(v1_document)
        first, second, third = await scraper.extract_records(v1_document)

        assert (first.home_score, first.away_score) == ("2", "1")
        assert first.status == "Fim de jogo"
        assert first.competition == "Brasileirão Série A"
        assert first.tier == "Rodada 12"
        assert second.kickoff_time == "16:00"
        assert second.home_score == ""
        assert third.competition == "Premier League"
        assert third.tier == ""

    @pytest.mark.asyncio
    async def test_metadata(self, v1_document):
        records = await RecordExtractor().extract(v1_document, SELECTORS)

        metadata = records[2].metadata
        assert metadata.card_index == 2
        assert metadata.selectors_used["card"] == "li.MatchCard"
        assert metadata.raw_text.startswith("Arsenal")

    @pytest.mark.asyncio
    async def test_never_returns_cards_without_teams(self):
        html = """
        <ul>
          <li class="MatchCard"><span>1</span><span>2</span></li>
          <li class="MatchCard"><span class="TeamName">Bahia</span><span class="TeamName">Vitória</span></li>
        </ul>
        """
        records = await RecordExtractor().extract(StaticDocument(html), SELECTORS)

        assert len(records) == 1
        assert records[0].home_team == "Bahia"
        assert records[0].metadata.card_index == 1
        assert all(record.has_team for record in records)


class TestTextFallbacks:
    @pytest.mark.asyncio
    async def test_score_and_status_from_card_text(self):
        html = """
        <ul><li class="MatchCard">
          <span class="TeamName">Bahia</span><span>3 - 1</span><span class="TeamName">Vitória</span>
          <span>Ao vivo</span>
        </li></ul>
        """
        (record,) = await RecordExtractor().extract(StaticDocument(html), SELECTORS)

        assert (record.home_score, record.away_score) == ("3", "1")
        assert record.status == "Ao vivo"

    @pytest.mark.asyncio
    async def test_teams_and_kickoff_from_lines(self):
        html = '<ul><li class="MatchCard"><div>Fortaleza</div><div>20:00</div><div>Sport</div></li></ul>'
        (record,) = await RecordExtractor().extract(StaticDocument(html), SELECTORS)

        assert (record.home_team, record.away_team) == ("Fortaleza", "Sport")
        assert record.kickoff_time == "20:00"

    @pytest.mark.asyncio
    async def test_team_names_containing_status_words_stay_teams(self):
        html = '<ul><li class="MatchCard"><div>Liverpool</div><div>16:00</div><div>Everton</div></li></ul>'
        (record,) = await RecordExtractor().extract(StaticDocument(html), SELECTORS)

        assert (record.home_team, record.away_team) == ("Liverpool", "Everton")
        assert record.status == ""

    @pytest.mark.asyncio
    async def test_competition_skips_day_captions(self):
        html = """
        <section>
          <h2 class="SectionHeader_day">Os jogos de hoje</h2>
          <h2 class="SectionHeader_title">Libertadores</h2>
          <ul><li class="MatchCard"><span class="TeamName">Bahia</span><span class="TeamName">Vitória</span></li></ul>
        </section>
        """
        (record,) = await RecordExtractor().extract(StaticDocument(html), SELECTORS)

        assert record.competition == "Libertadores"


class TestCardFallback:
    @pytest.mark.asyncio
    async def test_unmatched_card_selector_uses_layout_heuristic(self, unlabelled_document):
        extractor = RecordExtractor()
        selectors = ResolvedSelectorSet({Category.CARD: 'ul[class*="MatchCardsList"] > li'})
        records = await extractor.extract(unlabelled_document, selectors)

        assert extractor.last_used_fallback
        assert extractor.last_card_count == 1
        (record,) = records
        assert (record.home_team, record.away_team) == ("Corinthians", "Vasco")
        assert record.kickoff_time == "21:30"
        assert record.competition == "Copa do Brasil"

    @pytest.mark.asyncio
    async def test_no_plausible_container(self, empty_document):
        extractor = RecordExtractor()
        assert await extractor.extract(empty_document, ResolvedSelectorSet()) == []
        assert extractor.last_used_fallback


class TestExtractWithDetails:
    @pytest.mark.asyncio
    async def test_details(self, v1_document):
        details = await AdaptiveMatchScraper().extract_with_details(v1_document)

        assert details["extracted_count"] == 3
        assert details["card_count"] == 3
        assert not details["used_fallback"]
        assert details["selectors"]["card"] == 'ul[class*="MatchCardsList"] > li'
        assert details["resolution_details"]["teamName"][0]["pattern"] == '[class*="TeamName"]'
