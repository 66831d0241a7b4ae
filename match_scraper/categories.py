from enum import Enum

from .exceptions import UnknownCategoryError


class Category(str, Enum):
    """Semantic field located on the matches page."""

    CARD = "card"
    TEAM_NAME = "teamName"
    KICKOFF_TIME = "kickoffTime"
    SCORE = "score"
    STATUS = "status"
    COMPETITION = "competition"

    @classmethod
    def parse(cls: type["Category"], value: "Category | str") -> "Category":
        """Return the Category for a value, failing fast on unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownCategoryError(value) from None


# Site-tuned patterns, most specific first. Hashed CSS-module classes go stale
# on every deploy, so the attribute-contains and generic forms follow them.
DEFAULT_PATTERNS: dict[Category, list[str]] = {
    Category.CARD: [
        "ul.grid.MatchCardsList_matches__8_UwB > li",
        'ul[class*="MatchCardsList"] > li',
        'li[class*="MatchCard"]',
        'div[class*="MatchCard"]',
        'article[class*="SimpleMatchCard"]',
        '[data-testid="match-card"]',
        'li[class*="match"]',
        'div[class*="match"]',
        'article[class*="match"]',
        ".match-card",
        ".game-card",
        '[class*="card"][class*="match"]',
        'li:has([class*="team"])',
        'div:has([class*="team"])',
        'article:has([class*="team"])',
    ],
    Category.TEAM_NAME: [
        ".SimpleMatchCardTeam_simpleMatchCardTeam__name__7Ud8D",
        '[class*="simpleMatchCardTeam__name"]',
        '[class*="TeamName"]',
        '[class*="team__name"]',
        '[class*="matchCardTeam__name"]',
        '[class*="team-name"]',
        '[class*="teamName"]',
        '[class*="club-name"]',
        '[class*="clubName"]',
        ".team-name",
        ".club-name",
        '[data-testid*="team"]',
        '[data-testid*="club"]',
        'span[class*="name"]',
        'div[class*="name"]',
        'p[class*="name"]',
    ],
    Category.KICKOFF_TIME: [
        ".SimpleMatchCard_simpleMatchCard__infoMessage___NJqW.title-8-bold",
        "time",
        '[class*="infoMessage"]',
        '[class*="matchTime"]',
        '[class*="gameTime"]',
        '[class*="match-time"]',
        '[class*="game-time"]',
        "[datetime]",
        '[class*="time"]',
        '[class*="hour"]',
        '[class*="schedule"]',
        ".time",
        ".hour",
        ".schedule",
    ],
    Category.SCORE: [
        ".SimpleMatchCardTeam_simpleMatchCardTeam__score__UYMc_",
        '[class*="score"]',
        '[class*="placar"]',
        '[class*="result"]',
        '[class*="goals"]',
        '[class*="points"]',
        ".score",
        ".placar",
        ".result",
        ".goals",
        '[data-testid*="score"]',
    ],
    Category.STATUS: [
        ".ot-label-status",
        '[class*="status"]',
        '[class*="state"]',
        '[class*="live"]',
        '[class*="finished"]',
        '[class*="upcoming"]',
        ".status",
        ".state",
        ".live",
        '[data-testid*="status"]',
    ],
    Category.COMPETITION: [
        '[class*="title-6-bold"][class*="leftAlign"]',
        '[class*="SectionHeader"]',
        '[class*="competition"]',
        '[class*="league"]',
        '[class*="tournament"]',
        'h2[class*="title"]',
        'h3[class*="title"]',
        'h4[class*="title"]',
        ".competition",
        ".league",
        ".tournament",
        '[data-testid*="competition"]',
        '[data-testid*="league"]',
    ],
}
