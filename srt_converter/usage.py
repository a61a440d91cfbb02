"""Daily usage quota backed by a small JSON file.

WHY: Every conversion costs generator calls. A per-installation daily
cap keeps a shared API key from being drained by one runaway script.
The quota is caller state: the CLI and HTTP server consult it before a
conversion and increment it after a successful one; the core pipeline
never sees it.

HOW: UsageTracker reads and writes {"date": "YYYY-MM-DD", "count": n}.
A record for any other date counts as zero, so the quota resets at the
first check after midnight without a scheduler.

RULES:
- Unreadable or corrupt files count as zero usage (logged, not raised)
- increment() is only called after a conversion succeeds
- check() raises QuotaExceededError when the limit is reached
- today is injectable for tests
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Union

from srt_converter.config import DAILY_LIMIT

logger = logging.getLogger(__name__)


class QuotaExceededError(Exception):
    """Raised when the daily conversion limit has been reached."""


class UsageTracker:
    """Per-day conversion counter persisted to a JSON file."""

    def __init__(
        self,
        path: Union[str, Path],
        daily_limit: int = DAILY_LIMIT,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.path = Path(path)
        self.daily_limit = daily_limit
        self._today = today

    def _read_count(self) -> int:
        """Return today's stored count, or 0 if absent, stale, or corrupt."""
        if not self.path.is_file():
            return 0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable usage file %s: %s", self.path, exc)
            return 0
        if not isinstance(data, dict) or data.get("date") != self._today().isoformat():
            return 0
        try:
            return max(0, int(data.get("count", 0)))
        except (TypeError, ValueError):
            return 0

    def count(self) -> int:
        return self._read_count()

    def remaining(self) -> int:
        return max(0, self.daily_limit - self._read_count())

    def can_process(self) -> bool:
        return self._read_count() < self.daily_limit

    def check(self) -> None:
        """Raise QuotaExceededError if no conversions remain today."""
        if not self.can_process():
            raise QuotaExceededError(
                "Daily limit reached. {} conversions have been processed today. "
                "Please try again tomorrow.".format(self.daily_limit)
            )

    def increment(self) -> int:
        """Record one successful conversion and return today's new count."""
        new_count = self._read_count() + 1
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"date": self._today().isoformat(), "count": new_count}),
            encoding="utf-8",
        )
        return new_count
