"""Match scraper settings - browser, timing, heuristics and storage."""

import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
HISTORY_DIR = Path(os.getenv("MATCH_SCRAPER_HISTORY_DIR", str(BASE_DIR / "data" / "selector_history")))
# Entries kept per history list; older ones are dropped on save
HISTORY_MAX_ENTRIES = int(os.getenv("MATCH_SCRAPER_HISTORY_MAX_ENTRIES", "200"))

LOG_LEVEL = os.getenv("MATCH_SCRAPER_LOG_LEVEL", "INFO")

# Browser
DEFAULT_URL = os.getenv("MATCH_SCRAPER_URL", "https://onefootball.com/pt-br/jogos")
HEADLESS = os.getenv("MATCH_SCRAPER_HEADLESS", "true").lower() == "true"
VIEWPORT = {"width": 1366, "height": 768}
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
DEFAULT_WAIT_POLICY = "networkidle"

# Timing (milliseconds)
NAVIGATION_TIMEOUT_MS = int(os.getenv("MATCH_SCRAPER_NAVIGATION_TIMEOUT_MS", "60000"))
INITIAL_SETTLE_MS = int(os.getenv("MATCH_SCRAPER_INITIAL_SETTLE_MS", "5000"))
VALIDATION_TIMEOUT_MS = int(os.getenv("MATCH_SCRAPER_VALIDATION_TIMEOUT_MS", "10000"))
ATTEMPT_DELAY_MS = int(os.getenv("MATCH_SCRAPER_ATTEMPT_DELAY_MS", "2000"))
RELOAD_SETTLE_MS = int(os.getenv("MATCH_SCRAPER_RELOAD_SETTLE_MS", "3000"))

# Recovery
DEFAULT_MAX_ATTEMPTS = int(os.getenv("MATCH_SCRAPER_MAX_ATTEMPTS", "5"))

# Candidate scoring bonuses (only the specific-over-generic ordering matters)
HASHED_CLASS_BONUS = 10
ATTRIBUTE_CONTAINS_BONUS = 5
DIRECT_CHILD_BONUS = 3

# Mining
MAX_MINED_CANDIDATES = 10
MINED_MAX_CLASSES = 2

# Card discovery
CARD_MIN_WIDTH = 200
CARD_MIN_HEIGHT = 50
CARD_MIN_TEXT_LENGTH = 10
CARD_CLASS_HINTS = ("match", "card", "game")
CARD_TAGS = ("li", "div", "article")

# Text heuristics
TEAM_NAME_MIN_LENGTH = 2
TEAM_NAME_MAX_LENGTH = 50
COMPETITION_MIN_LENGTH = 5
TEXT_HEURISTIC_MAX_LENGTH = 100
MAJORITY_CLASS_RATIO = 0.5
MIN_VOTED_CLASS_LENGTH = 4
MINIMUM_CHILD_TEXT_LENGTH = 0

# DOM structure analysis
STRUCTURE_MAX_DEPTH = 5
STRUCTURE_MIN_CHILDREN = 2
STRUCTURE_CONTAINER_SELECTOR = 'main, section, div[class*="container"], div[class*="content"]'

# Records
UNKNOWN_TEAM = "unknown"
RAW_TEXT_SNIPPET_LENGTH = 200
SAMPLE_TEXT_LENGTH = 50
VALIDATION_SAMPLE_SIZE = 3

STATUS_KEYWORDS = (
    "Ao vivo",
    "Fim de jogo",
    "Intervalo",
    "Adiado",
    "Cancelado",
    "Live",
    "Full time",
    "Half time",
    "Postponed",
    "Cancelled",
)

# Headings that caption a day rather than name a competition
CAPTION_EXCLUSIONS = ("Os jogos de hoje", "feira", "Today's matches")

COMPETITION_FALLBACK_SELECTORS = (
    '[class*="SectionHeader_container"] [class*="Title_leftAlign"]',
    'h2[class*="title-6-bold"]',
)

TIER_SELECTORS = ('[class*="title-7-medium"][class*="subtitle"]',)
