import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from core import settings

from .models import RecoveryResult, SessionHistory

logger = logging.getLogger(__name__)

HISTORY_PREFIX = "selector-history_"
REPORT_PREFIX = "recovery-report_"


class HistoryStore:
    """Date-keyed JSON files holding what past sessions learned.

    One history file per day (``selector-history_YYYY-MM-DD.json``); a later
    save on the same day overwrites it. Recovery reports get their own
    timestamped files and are never read back.
    """

    def __init__(self: "HistoryStore", directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else settings.HISTORY_DIR

    def history_files(self: "HistoryStore") -> list[Path]:
        """History files, newest first."""
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"{HISTORY_PREFIX}*.json"), reverse=True)

    def load_latest(self: "HistoryStore") -> SessionHistory | None:
        """Most recent readable history, or None when there is none.

        Unreadable or malformed files are logged and skipped in favour of
        older ones.
        """
        for path in self.history_files():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                history = SessionHistory.from_dict(data)
            except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable history file {path.name}: {e}")
                continue
            logger.info(f"Loaded selector history from {path.name}")
            return history
        logger.info("No selector history found")
        return None

    def save(self: "HistoryStore", history: SessionHistory) -> Path:
        """Write ``history`` to today's file and return its path."""
        path = self.directory / f"{HISTORY_PREFIX}{datetime.now():%Y-%m-%d}.json"
        self._write(path, history.to_dict())
        logger.info(f"Selector history saved to {path}")
        return path

    def save_report(
        self: "HistoryStore",
        result: RecoveryResult,
        options: dict[str, Any] | None = None,
        validation_history: list[dict[str, Any]] | None = None,
    ) -> Path:
        """Write a recovery run's full diagnostics to a timestamped report file."""
        path = self.directory / f"{REPORT_PREFIX}{datetime.now():%Y-%m-%d_%H-%M-%S}.json"
        report = {
            "generatedAt": datetime.now().isoformat(),
            "options": options or {},
            **result.to_dict(),
            "validationHistory": validation_history or [],
        }
        self._write(path, report)
        logger.info(f"Recovery report saved to {path}")
        return path

    def _write(self: "HistoryStore", path: Path, data: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
