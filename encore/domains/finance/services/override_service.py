"""Lookup of manual forecast overrides by month, category and type."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from encore.domains.finance.services.currency import Currency, CurrencyAmount, to_decimal
from encore.domains.finance.services.data_quality import UNSUPPORTED_CURRENCY, SkippedRecords
from encore.domains.finance.services.forecast_repository import OverrideRecord
from encore.domains.finance.services.history_service import month_start

INCOME = "income"
EXPENSE = "expense"
DEFAULT_OVERRIDE_CURRENCY = Currency.GBP


def override_key(month: date, category: Optional[str], override_type: str) -> str:
    return f"{month_start(month).isoformat()}-{category or 'null'}-{override_type}"


@dataclass(frozen=True)
class ResolvedOverride:
    currency: Currency
    amount: Decimal

    def as_amount(self) -> CurrencyAmount:
        """The override replaces the whole cell: its currency slot, zero elsewhere."""
        return CurrencyAmount.single(self.currency, self.amount)


class OverrideIndex:
    def __init__(self, overrides: Iterable[OverrideRecord], skipped: SkippedRecords):
        self._keys: Dict[str, Optional[ResolvedOverride]] = {}
        self._expense_categories: Dict[date, List[str]] = {}
        for record in overrides:
            month = month_start(record.forecast_month)
            key = override_key(month, record.category, record.override_type)
            currency = Currency.parse(record.currency, DEFAULT_OVERRIDE_CURRENCY)
            if currency is None:
                # Still marks the month as overridden; never substitutes a value.
                skipped.record("forecast_overrides", UNSUPPORTED_CURRENCY, record.currency)
                self._keys[key] = None
                continue
            self._keys[key] = ResolvedOverride(currency=currency, amount=to_decimal(record.amount))
            if record.override_type == EXPENSE and record.category:
                categories = self._expense_categories.setdefault(month, [])
                if record.category not in categories:
                    categories.append(record.category)

    def income_override(self, month: date) -> Optional[ResolvedOverride]:
        return self._keys.get(override_key(month, None, INCOME))

    def expense_override(self, month: date, category: str) -> Optional[ResolvedOverride]:
        return self._keys.get(override_key(month, category, EXPENSE))

    def expense_categories(self, month: date) -> List[str]:
        return list(self._expense_categories.get(month_start(month), []))

    def has_override(self, month: date) -> bool:
        prefix = month_start(month).isoformat()
        return any(key.startswith(prefix) for key in self._keys)
