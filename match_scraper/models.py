from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from core import settings

from .categories import Category

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_timestamp() -> str:
    """Current local time in the format used across history records."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class SelectorCandidate:
    """A working pattern with the score it earned in one resolution pass."""

    pattern: str
    priority: float
    match_count: int = 0
    sample_text: str = ""


class ResolvedSelectorSet(MutableMapping):
    """Currently chosen selector per category.

    Every category is always present; unresolved categories map to None.
    Entries are overwritten, never deleted.
    """

    def __init__(self: "ResolvedSelectorSet", initial: Mapping[Category | str, str | None] | None = None) -> None:
        self._selectors: dict[Category, str | None] = {category: None for category in Category}
        for key, value in (initial or {}).items():
            self[key] = value

    def __getitem__(self: "ResolvedSelectorSet", key: Category | str) -> str | None:
        return self._selectors[Category.parse(key)]

    def __setitem__(self: "ResolvedSelectorSet", key: Category | str, value: str | None) -> None:
        self._selectors[Category.parse(key)] = value or None

    def __delitem__(self: "ResolvedSelectorSet", key: Category | str) -> None:
        # Deleting means "unresolved"; the key itself stays.
        self._selectors[Category.parse(key)] = None

    def __iter__(self: "ResolvedSelectorSet") -> Iterator[Category]:
        return iter(self._selectors)

    def __len__(self: "ResolvedSelectorSet") -> int:
        return len(self._selectors)

    def __repr__(self: "ResolvedSelectorSet") -> str:
        return f"ResolvedSelectorSet({self.to_dict()!r})"

    def copy(self: "ResolvedSelectorSet") -> "ResolvedSelectorSet":
        return ResolvedSelectorSet(self._selectors)

    def changed_categories(self: "ResolvedSelectorSet", previous: Mapping[Category, str | None]) -> list[Category]:
        """Categories whose selector differs from ``previous``."""
        return [category for category in Category if self[category] != previous.get(category)]

    def unresolved(self: "ResolvedSelectorSet") -> list[Category]:
        return [category for category, pattern in self._selectors.items() if pattern is None]

    def to_dict(self: "ResolvedSelectorSet") -> dict[str, str | None]:
        return {category.value: pattern for category, pattern in self._selectors.items()}

    @classmethod
    def from_dict(cls: type["ResolvedSelectorSet"], data: Mapping[str, str | None]) -> "ResolvedSelectorSet":
        return cls({Category.parse(key): value for key, value in data.items()})


@dataclass(frozen=True)
class RecordMetadata:
    """Diagnostics attached to an extracted record."""

    card_index: int
    selectors_used: Mapping[str, str | None] = field(default_factory=dict)
    raw_text: str = ""

    def __post_init__(self: "RecordMetadata") -> None:
        object.__setattr__(self, "selectors_used", MappingProxyType(dict(self.selectors_used)))


@dataclass(frozen=True)
class MatchRecord:
    """One match as read from a card. Empty strings mean "not found"."""

    home_team: str = settings.UNKNOWN_TEAM
    away_team: str = settings.UNKNOWN_TEAM
    kickoff_time: str = ""
    status: str = ""
    home_score: str = ""
    away_score: str = ""
    competition: str = ""
    tier: str = ""
    metadata: RecordMetadata | None = None

    @property
    def has_team(self: "MatchRecord") -> bool:
        return self.home_team != settings.UNKNOWN_TEAM or self.away_team != settings.UNKNOWN_TEAM

    def to_dict(self: "MatchRecord", include_metadata: bool = False) -> dict[str, Any]:
        data = {
            "home_team": self.home_team,
            "away_team": self.away_team,
            "kickoff_time": self.kickoff_time,
            "status": self.status,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "competition": self.competition,
            "tier": self.tier,
        }
        if include_metadata and self.metadata is not None:
            data["metadata"] = {
                "card_index": self.metadata.card_index,
                "selectors_used": dict(self.metadata.selectors_used),
                "raw_text": self.metadata.raw_text,
            }
        return data


@dataclass(frozen=True)
class ValidationReport:
    per_category: Mapping[Category, bool]
    failed_categories: tuple[Category, ...]

    @property
    def healthy(self: "ValidationReport") -> bool:
        return not self.failed_categories

    @classmethod
    def from_results(cls: type["ValidationReport"], results: Mapping[Category, bool]) -> "ValidationReport":
        per_category = MappingProxyType(dict(results))
        failed = tuple(category for category, ok in per_category.items() if not ok)
        return cls(per_category=per_category, failed_categories=failed)


@dataclass(frozen=True)
class ValidationEntry:
    """One re-query of one selector against the document."""

    category: str
    pattern: str | None
    match_count: int
    duration: float
    timestamp: str
    samples: tuple[dict[str, Any], ...] = ()
    error: str | None = None

    @property
    def succeeded(self: "ValidationEntry") -> bool:
        return self.error is None and self.match_count > 0

    def to_dict(self: "ValidationEntry") -> dict[str, Any]:
        data = asdict(self)
        data["samples"] = list(self.samples)
        return data


@dataclass(frozen=True)
class RecoveryAttempt:
    strategy_name: str
    timestamp: str
    succeeded: bool
    error: str | None = None

    def to_dict(self: "RecoveryAttempt") -> dict[str, Any]:
        return asdict(self)


@dataclass
class Metrics:
    """Counters for one process lifetime."""

    validations_performed: int = 0
    failures_detected: int = 0
    successful_recoveries: int = 0
    strategy_invocations: dict[str, int] = field(default_factory=dict)
    total_validation_seconds: float = 0.0

    def count_strategy(self: "Metrics", name: str) -> None:
        self.strategy_invocations[name] = self.strategy_invocations.get(name, 0) + 1

    def to_dict(self: "Metrics") -> dict[str, Any]:
        data = asdict(self)
        data["total_validation_seconds"] = round(self.total_validation_seconds, 4)
        return data


@dataclass(frozen=True)
class RecoveryResult:
    succeeded: bool
    attempts: int
    history: tuple[RecoveryAttempt, ...]
    metrics: Metrics
    selectors: ResolvedSelectorSet

    def to_dict(self: "RecoveryResult") -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "attempts": self.attempts,
            "history": [attempt.to_dict() for attempt in self.history],
            "metrics": self.metrics.to_dict(),
            "selectors": self.selectors.to_dict(),
        }


@dataclass
class SessionHistory:
    """What one session learned, as persisted between runs."""

    resolved_selectors: ResolvedSelectorSet
    catalog_snapshot: dict[str, list[str]]
    validation_history: list[dict[str, Any]] = field(default_factory=list)
    resolution_history: list[dict[str, Any]] = field(default_factory=list)
    updated_at: str = field(default_factory=now_timestamp)

    def to_dict(self: "SessionHistory") -> dict[str, Any]:
        return {
            "updatedAt": self.updated_at,
            "resolvedSelectors": self.resolved_selectors.to_dict(),
            "catalog": self.catalog_snapshot,
            "validationHistory": self.validation_history,
            "resolutionHistory": self.resolution_history,
        }

    @classmethod
    def from_dict(cls: type["SessionHistory"], data: Mapping[str, Any]) -> "SessionHistory":
        return cls(
            resolved_selectors=ResolvedSelectorSet.from_dict(data.get("resolvedSelectors") or {}),
            catalog_snapshot={key: list(value) for key, value in (data.get("catalog") or {}).items()},
            validation_history=list(data.get("validationHistory") or []),
            resolution_history=list(data.get("resolutionHistory") or []),
            updated_at=data.get("updatedAt") or now_timestamp(),
        )
