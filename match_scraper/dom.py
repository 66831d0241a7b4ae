"""Helpers for querying a BeautifulSoup snapshot of the matches page.

Query functions passed to ``DocumentSession.evaluate`` are built from these,
so everything here is synchronous and works on plain ``Tag`` objects.
"""

import hashlib
import re
from collections import Counter
from typing import Any

import soupsieve
from bs4 import BeautifulSoup, Tag

from core import settings

RENDERED_WIDTH_ATTR = "data-rendered-width"
RENDERED_HEIGHT_ATTR = "data-rendered-height"

CLOCK_RE = re.compile(r"\d{1,2}:\d{2}")
CLOCK_ONLY_RE = re.compile(r"^\d{1,2}:\d{2}$")
SCORE_RE = re.compile(r"(\d+)\s*[-x]\s*(\d+)")
DIGITS_ONLY_RE = re.compile(r"^\d+$")
SHORT_NUMBER_RE = re.compile(r"^\d{1,2}$")
VERSUS_RE = re.compile(r"\bvs\b|\bx\b", re.IGNORECASE)
DATE_CAPTION_RE = re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")
HASHED_CLASS_RE = re.compile(r"\w__\w")
STATUS_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(keyword) for keyword in settings.STATUS_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def select_safe(root: Tag, pattern: str | None) -> list[Tag]:
    """Run a CSS selector, treating invalid or unsupported syntax as no match."""
    if not pattern:
        return []
    try:
        return root.select(pattern)
    except (soupsieve.SelectorSyntaxError, NotImplementedError):
        return []


def is_valid_selector(pattern: str | None) -> bool:
    if not pattern:
        return False
    try:
        soupsieve.compile(pattern)
    except (soupsieve.SelectorSyntaxError, NotImplementedError):
        return False
    return True


def clean_text(text: str | None) -> str:
    """Trim and collapse whitespace."""
    return " ".join(text.split()) if text else ""


def text_lines(element: Tag) -> list[str]:
    """Non-empty lines of an element's text, roughly what ``innerText`` splits into."""
    lines = []
    for chunk in element.get_text("\n").split("\n"):
        line = chunk.strip()
        if line:
            lines.append(line)
    return lines


def inner_text(element: Tag) -> str:
    return "\n".join(text_lines(element))


def class_list(element: Tag) -> list[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return [cls for cls in classes if cls]


def class_text(element: Tag) -> str:
    return " ".join(class_list(element)).lower()


def rendered_box(element: Tag) -> tuple[float, float]:
    """Width and height stamped on the element by the browser session.

    Elements that were never measured report (0, 0).
    """

    def _read(attr: str) -> float:
        try:
            return float(element.get(attr) or 0)
        except (TypeError, ValueError):
            return 0.0

    return _read(RENDERED_WIDTH_ATTR), _read(RENDERED_HEIGHT_ATTR)


def is_large_enough(element: Tag) -> bool:
    width, height = rendered_box(element)
    return width > settings.CARD_MIN_WIDTH and height > settings.CARD_MIN_HEIGHT


def has_card_class(element: Tag) -> bool:
    classes = class_text(element)
    return any(hint in classes for hint in settings.CARD_CLASS_HINTS)


def has_text_children(element: Tag) -> bool:
    """Check if element has children with text (not a leaf text node)."""
    for child in element.children:
        if isinstance(child, Tag):
            child_text = child.get_text(strip=True)
            if child_text and len(child_text) > settings.MINIMUM_CHILD_TEXT_LENGTH:
                return True
    return False


def element_children(element: Tag) -> list[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def is_clock(text: str) -> bool:
    return bool(CLOCK_ONLY_RE.match(text.strip()))


def mentions_status(text: str) -> bool:
    """Whole-word match, so "Liverpool" does not read as "Live"."""
    return bool(STATUS_RE.search(text))


def is_caption(text: str) -> bool:
    """True for headings that caption a day ("Os jogos de hoje", "quarta-feira", 12/05)."""
    return any(exclusion in text for exclusion in settings.CAPTION_EXCLUSIONS) or bool(DATE_CAPTION_RE.search(text))


def synthesize_selector(element: Tag) -> str:
    """Build a selector from the element's id, else up to two classes, else its tag."""
    element_id = element.get("id")
    if element_id:
        return f"#{soupsieve.escape(element_id)}"

    classes = class_list(element)[: settings.MINED_MAX_CLASSES]
    if classes:
        return "".join(f".{soupsieve.escape(cls)}" for cls in classes)

    return element.name


def format_element(element: Tag) -> dict[str, Any]:
    """Format an element with its tag, classes, text sample and rendered box."""
    width, height = rendered_box(element)
    return {
        "tag": element.name,
        "classes": class_list(element),
        "text": clean_text(element.get_text(" "))[: settings.SAMPLE_TEXT_LENGTH],
        "box": {"width": width, "height": height},
    }


def document_fingerprint(root: BeautifulSoup) -> str:
    """Hash of the tag/class tokens on the page, insensitive to text changes."""
    tokens = Counter(
        ".".join([element.name, *sorted(class_list(element))]) for element in root.find_all(True)
    )
    digest = hashlib.md5()
    for token, count in sorted(tokens.items()):
        digest.update(f"{token}:{count}|".encode())
    return digest.hexdigest()[:12]
