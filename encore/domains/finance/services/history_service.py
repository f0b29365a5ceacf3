"""Bucket past orders and expenses into monthly snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Union

from encore.domains.finance.services.currency import Currency, CurrencyAmount, to_decimal
from encore.domains.finance.services.data_quality import (
    EXCLUDED_CATEGORY,
    NON_DEBIT,
    UNCATEGORIZED,
    UNSUPPORTED_CURRENCY,
    SkippedRecords,
)
from encore.domains.finance.services.forecast_repository import OrderRecord, TransactionRecord

MEMBERSHIP_PRODUCT_TYPES = frozenset({"membership", "subscription"})
EXCLUDED_CATEGORIES = frozenset({"ignore", "internal_transfer"})
DEFAULT_RECORD_CURRENCY = Currency.USD


def month_key(value: Union[date, datetime]) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_start(value: Union[date, datetime]) -> date:
    return date(value.year, value.month, 1)


def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from ``value`` (negative goes back)."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def lookback_start(as_of: date, months: int) -> date:
    return add_months(month_start(as_of), -months)


@dataclass(frozen=True)
class MonthlySnapshot:
    """Totals for one calendar month. Frozen once ``aggregate_history`` returns."""

    month_key: str
    course_revenue: CurrencyAmount = field(default_factory=CurrencyAmount)
    membership_revenue: CurrencyAmount = field(default_factory=CurrencyAmount)
    expenses_by_category: Mapping[str, CurrencyAmount] = field(
        default_factory=lambda: MappingProxyType({})
    )


def aggregate_history(
    orders: Iterable[OrderRecord],
    transactions: Iterable[TransactionRecord],
    skipped: SkippedRecords,
) -> Mapping[str, MonthlySnapshot]:
    """Return a read-only month-key -> snapshot map.

    A month only gets a snapshot once a row has actually been counted in it,
    so rows dropped for data-quality reasons never make a month look populated.
    """
    course: Dict[str, CurrencyAmount] = {}
    membership: Dict[str, CurrencyAmount] = {}
    expenses: Dict[str, Dict[str, CurrencyAmount]] = {}
    months: Dict[str, None] = {}

    def credit(bucket: Dict[str, CurrencyAmount], key: str, currency: Currency, amount) -> None:
        bucket[key] = bucket.get(key, CurrencyAmount()).add(CurrencyAmount.single(currency, amount))

    for order in orders:
        currency = Currency.parse(order.currency, DEFAULT_RECORD_CURRENCY)
        if currency is None:
            skipped.record("orders", UNSUPPORTED_CURRENCY, order.currency)
            continue
        key = month_key(order.created_at)
        months.setdefault(key)
        target = membership if order.product_type in MEMBERSHIP_PRODUCT_TYPES else course
        credit(target, key, currency, to_decimal(order.amount))

    for tx in transactions:
        amount = to_decimal(tx.amount)
        if amount >= 0:
            # Credits are income-side movements; only debits are expenses.
            skipped.record("financial_transactions", NON_DEBIT)
            continue
        if not tx.category:
            skipped.record("financial_transactions", UNCATEGORIZED)
            continue
        if tx.category in EXCLUDED_CATEGORIES:
            skipped.record("financial_transactions", EXCLUDED_CATEGORY, tx.category)
            continue
        currency = Currency.parse(tx.currency, DEFAULT_RECORD_CURRENCY)
        if currency is None:
            skipped.record("financial_transactions", UNSUPPORTED_CURRENCY, tx.currency)
            continue
        key = month_key(tx.transaction_date)
        months.setdefault(key)
        credit(expenses.setdefault(key, {}), tx.category, currency, abs(amount))

    snapshots = {
        key: MonthlySnapshot(
            month_key=key,
            course_revenue=course.get(key, CurrencyAmount()),
            membership_revenue=membership.get(key, CurrencyAmount()),
            expenses_by_category=MappingProxyType(expenses.get(key, {})),
        )
        for key in months
    }
    return MappingProxyType(snapshots)
