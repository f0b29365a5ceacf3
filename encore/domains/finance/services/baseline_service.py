"""Baseline rates: historical averages and the recurring-revenue run-rate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from encore.domains.finance.services.currency import Currency, CurrencyAmount, to_decimal
from encore.domains.finance.services.data_quality import (
    UNSUPPORTED_CURRENCY,
    UNSUPPORTED_PLAN_TYPE,
    SkippedRecords,
)
from encore.domains.finance.services.forecast_repository import SubscriptionRecord
from encore.domains.finance.services.history_service import (
    DEFAULT_RECORD_CURRENCY,
    MonthlySnapshot,
    add_months,
    month_key,
    month_start,
)

logger = logging.getLogger(__name__)


class PlanType(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PlanType"]:
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None

    def monthly_equivalent(self, amount) -> Decimal:
        if self is PlanType.ANNUAL:
            return to_decimal(amount) / 12
        return to_decimal(amount)


@dataclass(frozen=True)
class BaselineRates:
    course_revenue: CurrencyAmount
    membership_revenue: CurrencyAmount
    expenses_by_category: Mapping[str, CurrencyAmount]
    months_with_data: int
    mrr: CurrencyAmount

    def to_dict(self) -> dict:
        return {
            "avgCourseRevenue": self.course_revenue.to_dict(),
            "avgMembershipRevenue": self.membership_revenue.to_dict(),
            "mrrBaseline": self.mrr.to_dict(),
            "avgExpensesByCategory": {
                category: amount.to_dict() for category, amount in self.expenses_by_category.items()
            },
            "monthsWithData": self.months_with_data,
        }


def baseline_month_keys(as_of: date, window: int = 3) -> List[str]:
    """Keys for the ``window`` calendar months before the month of ``as_of``, newest first."""
    current = month_start(as_of)
    return [month_key(add_months(current, -offset)) for offset in range(1, window + 1)]


def monthly_recurring_revenue(
    subscriptions: Iterable[SubscriptionRecord], skipped: SkippedRecords
) -> CurrencyAmount:
    mrr = CurrencyAmount()
    for sub in subscriptions:
        currency = Currency.parse(sub.currency, DEFAULT_RECORD_CURRENCY)
        if currency is None:
            skipped.record("subscriptions", UNSUPPORTED_CURRENCY, sub.currency)
            continue
        plan = PlanType.parse(sub.plan_type)
        if plan is None:
            # TODO: decide with finance whether weekly/quarterly plans should be normalised into MRR.
            logger.warning("Excluding subscription with unsupported plan type %r from MRR", sub.plan_type)
            skipped.record("subscriptions", UNSUPPORTED_PLAN_TYPE, sub.plan_type)
            continue
        mrr = mrr.add(CurrencyAmount.single(currency, plan.monthly_equivalent(sub.amount)))
    return mrr


def compute_baselines(
    snapshots: Mapping[str, MonthlySnapshot],
    subscriptions: Iterable[SubscriptionRecord],
    as_of: date,
    skipped: SkippedRecords,
    window: int = 3,
) -> BaselineRates:
    """Average the last ``window`` months that have data and compute MRR.

    Months without a snapshot count toward neither the sum nor the divisor.
    """
    course_total = CurrencyAmount()
    membership_total = CurrencyAmount()
    expense_totals: Dict[str, CurrencyAmount] = {}
    months_with_data = 0

    for key in baseline_month_keys(as_of, window):
        snapshot = snapshots.get(key)
        if snapshot is None:
            continue
        months_with_data += 1
        course_total = course_total.add(snapshot.course_revenue)
        membership_total = membership_total.add(snapshot.membership_revenue)
        for category, amount in snapshot.expenses_by_category.items():
            expense_totals[category] = expense_totals.get(category, CurrencyAmount()).add(amount)

    return BaselineRates(
        course_revenue=course_total.scale(months_with_data),
        membership_revenue=membership_total.scale(months_with_data),
        expenses_by_category=MappingProxyType(
            {category: amount.scale(months_with_data) for category, amount in expense_totals.items()}
        ),
        months_with_data=months_with_data,
        mrr=monthly_recurring_revenue(subscriptions, skipped),
    )
