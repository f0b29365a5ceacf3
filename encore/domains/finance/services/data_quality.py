"""Counters for rows a forecast run leaves out."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict

logger = logging.getLogger(__name__)

UNSUPPORTED_CURRENCY = "unsupported_currency"
UNCATEGORIZED = "uncategorized"
EXCLUDED_CATEGORY = "excluded_category"
NON_DEBIT = "non_debit"
UNSUPPORTED_PLAN_TYPE = "unsupported_plan_type"
UNSUPPORTED_FREQUENCY = "unsupported_frequency"


class SkippedRecords:
    """Per-source, per-reason tally of excluded rows."""

    def __init__(self) -> None:
        self._counts: Counter = Counter()

    def record(self, source: str, reason: str, detail: object = None) -> None:
        self._counts[(source, reason)] += 1
        logger.debug("Skipping %s row (%s): %r", source, reason, detail)

    def count(self, source: str, reason: str) -> int:
        return self._counts[(source, reason)]

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        result: Dict[str, Dict[str, int]] = {}
        for (source, reason), count in sorted(self._counts.items()):
            result.setdefault(source, {})[reason] = count
        return result

    def log_summary(self) -> None:
        if self.total:
            logger.warning("Forecast excluded %d upstream rows: %s", self.total, self.to_dict())
