import logging
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup, Tag

from core import settings

from .categories import Category
from .document import DocumentSession
from .dom import (
    CLOCK_RE,
    DIGITS_ONLY_RE,
    SCORE_RE,
    SHORT_NUMBER_RE,
    clean_text,
    has_card_class,
    inner_text,
    is_caption,
    is_large_enough,
    mentions_status,
    select_safe,
    text_lines,
)
from .models import MatchRecord, RecordMetadata, ResolvedSelectorSet

logger = logging.getLogger(__name__)


def _find_fallback_cards(root: BeautifulSoup) -> list[Tag]:
    """Elements that look like match cards by class, rendered size and text length.

    Nested matches are collapsed to the outermost one.
    """
    cards = []
    kept = set()
    for element in root.find_all(list(settings.CARD_TAGS)):
        if not has_card_class(element) or not is_large_enough(element):
            continue
        if len(inner_text(element)) <= settings.CARD_MIN_TEXT_LENGTH:
            continue
        if any(id(parent) in kept for parent in element.parents):
            continue
        kept.add(id(element))
        cards.append(element)
    return cards


def _first_text(elements: list[Tag]) -> str:
    for element in elements:
        text = clean_text(element.get_text(" "))
        if text:
            return text
    return ""


def _first_heading(scope: Tag, patterns: list[str | None]) -> str:
    """Text of the first non-caption element matched by any pattern in ``scope``."""
    for pattern in patterns:
        for element in select_safe(scope, pattern):
            text = clean_text(element.get_text(" "))
            if text and not is_caption(text):
                return text
    return ""


def _is_team_line(line: str) -> bool:
    return (
        settings.TEAM_NAME_MIN_LENGTH < len(line) < settings.TEAM_NAME_MAX_LENGTH
        and not CLOCK_RE.search(line)
        and not DIGITS_ONLY_RE.match(line)
        and not SCORE_RE.fullmatch(line)
        and not mentions_status(line)
    )


def _extract_teams(card: Tag, lines: list[str], pattern: str | None) -> tuple[str, str]:
    home = away = settings.UNKNOWN_TEAM
    names = [clean_text(element.get_text(" ")) for element in select_safe(card, pattern)]
    names = [name for name in names if name]
    if len(names) >= 2:
        home, away = names[0], names[1]

    if home == settings.UNKNOWN_TEAM:
        possible = [line for line in lines if _is_team_line(line)]
        if len(possible) >= 2:
            home, away = possible[0], possible[1]
        elif possible:
            home = possible[0]
    return home, away


def _extract_kickoff(card: Tag, full_text: str, pattern: str | None) -> str:
    kickoff = _first_text(select_safe(card, pattern)[:1])
    if not kickoff:
        match = CLOCK_RE.search(full_text)
        if match:
            kickoff = match.group(0)
    return kickoff


def _extract_scores(card: Tag, full_text: str, lines: list[str], pattern: str | None) -> tuple[str, str]:
    scores = [clean_text(element.get_text(" ")) for element in select_safe(card, pattern)]
    if len(scores) >= 2 and (scores[0] or scores[1]):
        return scores[0], scores[1]

    match = SCORE_RE.search(full_text)
    if match:
        return match.group(1), match.group(2)

    numbers = [line for line in lines if SHORT_NUMBER_RE.match(line)]
    if len(numbers) >= 2:
        return numbers[0], numbers[1]
    return "", ""


def _extract_status(card: Tag, lines: list[str], pattern: str | None) -> str:
    status = _first_text(select_safe(card, pattern)[:1])
    if not status:
        for line in lines:
            if mentions_status(line):
                return line
    return status


def _extract_competition(root: BeautifulSoup, card: Tag, section: Tag | None, pattern: str | None) -> str:
    competition = _first_heading(card, [pattern])
    if not competition and section is not None:
        competition = _first_heading(section, [pattern])
    if not competition:
        competition = _first_heading(root, list(settings.COMPETITION_FALLBACK_SELECTORS))
    return competition


def _extract_tier(section: Tag | None) -> str:
    if section is None:
        return ""
    return _first_heading(section, list(settings.TIER_SELECTORS))


def _extract_records(root: BeautifulSoup, selectors: dict[str, str | None]) -> dict[str, Any]:
    """Read one record per card using the resolved selectors and text fallbacks."""
    cards = select_safe(root, selectors.get(Category.CARD.value))
    used_fallback = not cards
    if used_fallback:
        cards = _find_fallback_cards(root)

    records = []
    for index, card in enumerate(cards):
        lines = text_lines(card)
        full_text = "\n".join(lines)
        section = card.find_parent("section")

        home_team, away_team = _extract_teams(card, lines, selectors.get(Category.TEAM_NAME.value))
        home_score, away_score = _extract_scores(card, full_text, lines, selectors.get(Category.SCORE.value))
        if home_team == settings.UNKNOWN_TEAM and away_team == settings.UNKNOWN_TEAM:
            continue

        records.append(
            {
                "home_team": home_team,
                "away_team": away_team,
                "kickoff_time": _extract_kickoff(card, full_text, selectors.get(Category.KICKOFF_TIME.value)),
                "status": _extract_status(card, lines, selectors.get(Category.STATUS.value)),
                "home_score": home_score,
                "away_score": away_score,
                "competition": _extract_competition(
                    root, card, section, selectors.get(Category.COMPETITION.value)
                ),
                "tier": _extract_tier(section),
                "card_index": index,
                "raw_text": full_text[: settings.RAW_TEXT_SNIPPET_LENGTH],
            }
        )
    return {"records": records, "card_count": len(cards), "used_fallback": used_fallback}


class RecordExtractor:
    """Turns match cards into MatchRecords.

    Each field is read with the resolved selector first and, when that gives
    nothing, with a text heuristic over the card's content. A missing card
    selector falls back to finding cards by class, size and text length.
    """

    def __init__(self: "RecordExtractor") -> None:
        self.last_card_count = 0
        self.last_used_fallback = False

    async def extract(
        self: "RecordExtractor",
        session: DocumentSession,
        selectors: Mapping[Category, str | None],
    ) -> list[MatchRecord]:
        """Extract match records from the current document.

        Args:
            session: Document holding the match cards
            selectors: Resolved selector per category

        Returns:
            Records with at least one identified team, in card order
        """
        selectors = ResolvedSelectorSet(selectors)
        selectors_used = selectors.to_dict()
        result = await session.evaluate(_extract_records, selectors_used)

        self.last_card_count = result["card_count"]
        self.last_used_fallback = result["used_fallback"]
        if self.last_used_fallback:
            logger.warning(f"No cards for selector {selectors[Category.CARD]!r}, used layout heuristic")
        logger.info(f"Processing {self.last_card_count} cards")

        records = [
            MatchRecord(
                home_team=item["home_team"],
                away_team=item["away_team"],
                kickoff_time=item["kickoff_time"],
                status=item["status"],
                home_score=item["home_score"],
                away_score=item["away_score"],
                competition=item["competition"],
                tier=item["tier"],
                metadata=RecordMetadata(
                    card_index=item["card_index"],
                    selectors_used=selectors_used,
                    raw_text=item["raw_text"],
                ),
            )
            for item in result["records"]
        ]
        logger.info(f"Extracted {len(records)} matches")
        return records
