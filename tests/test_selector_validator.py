"""Tests for selector validation."""

import asyncio

import pytest

from match_scraper import Category, Metrics, ResolvedSelectorSet, SelectorValidator, StaticDocument

V1_SELECTORS = ResolvedSelectorSet(
    {
        Category.CARD: "li.MatchCard",
        Category.TEAM_NAME: ".TeamName",
        Category.KICKOFF_TIME: "time",
        Category.SCORE: ".score",
        Category.STATUS: ".status",
        Category.COMPETITION: "h2",
    }
)


class SlowDocument(StaticDocument):
    async def evaluate(self, fn, *args):
        await asyncio.sleep(1)
        return await super().evaluate(fn, *args)


class TestValidateSelector:
    @pytest.mark.asyncio
    async def test_matching_selector(self, v1_document):
        validator = SelectorValidator()
        assert await validator.validate_selector(v1_document, Category.CARD, "li.MatchCard")

        (entry,) = validator.history
        assert entry.match_count == 3
        assert entry.samples[0]["tag"] == "li"
        assert len(entry.samples) == 3

    @pytest.mark.asyncio
    async def test_zero_matches_is_a_failure_not_an_error(self, v1_document):
        validator = SelectorValidator()
        assert not await validator.validate_selector(v1_document, Category.CARD, "li.Gone")
        assert validator.history[0].error is None
        assert validator.metrics.failures_detected == 1

    @pytest.mark.asyncio
    async def test_invalid_selector(self, v1_document):
        validator = SelectorValidator()
        assert not await validator.validate_selector(v1_document, "card", "li[")
        assert validator.history[0].error.startswith("Invalid selector")

    @pytest.mark.asyncio
    async def test_unresolved_category_fails_without_query(self, v1_document):
        validator = SelectorValidator()
        assert not await validator.validate_selector(v1_document, Category.SCORE, None)
        assert validator.history == []
        assert validator.metrics.validations_performed == 1
        assert validator.metrics.failures_detected == 1

    @pytest.mark.asyncio
    async def test_timeout_is_a_failure(self):
        validator = SelectorValidator(timeout_ms=10)
        document = SlowDocument("<ul><li class='MatchCard'>x</li></ul>")

        assert not await validator.validate_selector(document, Category.CARD, "li.MatchCard")
        assert validator.history[0].error == "TimeoutError"


class TestValidateAll:
    @pytest.mark.asyncio
    async def test_healthy_page(self, v1_document):
        report = await SelectorValidator().validate_all(v1_document, V1_SELECTORS)
        assert report.healthy
        assert all(report.per_category.values())

    @pytest.mark.asyncio
    async def test_renamed_card_class_fails_only_card(self, v2_document):
        report = await SelectorValidator().validate_all(v2_document, V1_SELECTORS)
        assert report.failed_categories == (Category.CARD,)

    @pytest.mark.asyncio
    async def test_validating_twice_gives_identical_reports(self, v2_document):
        validator = SelectorValidator()
        first = await validator.validate_all(v2_document, V1_SELECTORS)
        second = await validator.validate_all(v2_document, V1_SELECTORS)

        assert dict(first.per_category) == dict(second.per_category)
        assert first.failed_categories == second.failed_categories

    @pytest.mark.asyncio
    async def test_metrics(self, v2_document):
        metrics = Metrics()
        await SelectorValidator(metrics).validate_all(v2_document, V1_SELECTORS)

        assert metrics.validations_performed == len(Category)
        assert metrics.failures_detected == 1
        assert metrics.total_validation_seconds >= 0
