"""Month-by-month income, expense and profit/loss projection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence

from encore.domains.finance.services.baseline_service import BaselineRates, compute_baselines
from encore.domains.finance.services.currency import Currency, CurrencyAmount, to_decimal
from encore.domains.finance.services.data_quality import (
    UNSUPPORTED_CURRENCY,
    UNSUPPORTED_FREQUENCY,
    SkippedRecords,
)
from encore.domains.finance.services.forecast_repository import (
    ForecastRepository,
    ForecastSettingRecord,
)
from encore.domains.finance.services.history_service import (
    MonthlySnapshot,
    add_months,
    aggregate_history,
    lookback_start,
    month_key,
    month_start,
)
from encore.domains.finance.services.override_service import OverrideIndex

logger = logging.getLogger(__name__)

DEFAULT_MONTHS = 12
DEFAULT_LOOKBACK_MONTHS = 6
DEFAULT_BASELINE_MONTHS = 3
DEFAULT_SETTING_CURRENCY = Currency.GBP
SUMMARY_MONTHS = 3


@dataclass(frozen=True)
class MonthlyForecast:
    month: date
    income: CurrencyAmount
    expenses: CurrencyAmount
    profit_loss: CurrencyAmount
    course_revenue: CurrencyAmount
    membership_revenue: CurrencyAmount
    expenses_by_category: Mapping[str, CurrencyAmount]
    is_actual: bool = False
    has_override: bool = False

    def to_dict(self) -> dict:
        return {
            "month": self.month.isoformat(),
            "income": self.income.to_dict(),
            "expenses": self.expenses.to_dict(),
            "profitLoss": self.profit_loss.to_dict(),
            "breakdown": {
                "courseRevenue": self.course_revenue.to_dict(),
                "membershipRevenue": self.membership_revenue.to_dict(),
                "expensesByCategory": {
                    category: amount.to_dict() for category, amount in self.expenses_by_category.items()
                },
            },
            "isActual": self.is_actual,
            "hasOverride": self.has_override,
        }


@dataclass
class ForecastResult:
    forecasts: List[MonthlyForecast]
    baselines: BaselineRates
    skipped: SkippedRecords = field(default_factory=SkippedRecords)

    def totals(self, months: Optional[int] = None) -> Dict[str, Dict[str, float]]:
        window = self.forecasts if months is None else self.forecasts[:months]
        return {
            "income": CurrencyAmount.total(f.income for f in window).to_dict(),
            "expenses": CurrencyAmount.total(f.expenses for f in window).to_dict(),
            "profitLoss": CurrencyAmount.total(f.profit_loss for f in window).to_dict(),
        }

    def to_dict(self) -> dict:
        return {
            "forecasts": [forecast.to_dict() for forecast in self.forecasts],
            "baselines": self.baselines.to_dict(),
            "totals": {
                "threeMonth": self.totals(SUMMARY_MONTHS),
                "horizon": self.totals(),
            },
            "skipped": self.skipped.to_dict(),
        }


def _setting_baselines(
    settings: Sequence[ForecastSettingRecord], skipped: SkippedRecords
) -> Dict[str, Optional[CurrencyAmount]]:
    """Monthly amount per settings category; None means fall back to history."""
    resolved: Dict[str, Optional[CurrencyAmount]] = {}
    for setting in settings:
        baseline_amount = to_decimal(setting.baseline_amount)
        if not baseline_amount:
            resolved[setting.category] = None
            continue
        currency = Currency.parse(setting.baseline_currency, DEFAULT_SETTING_CURRENCY)
        if currency is None:
            skipped.record("expense_forecast_settings", UNSUPPORTED_CURRENCY, setting.baseline_currency)
            resolved[setting.category] = None
            continue
        if setting.frequency == "monthly":
            resolved[setting.category] = CurrencyAmount.single(currency, baseline_amount)
        elif setting.frequency == "annual":
            resolved[setting.category] = CurrencyAmount.single(currency, baseline_amount / 12)
        elif setting.frequency == "one_time":
            # One-off spend has no monthly run-rate.
            resolved[setting.category] = CurrencyAmount()
        else:
            skipped.record("expense_forecast_settings", UNSUPPORTED_FREQUENCY, setting.frequency)
            resolved[setting.category] = CurrencyAmount()
    return resolved


def _project_expenses(
    month: date,
    setting_baselines: Mapping[str, Optional[CurrencyAmount]],
    baselines: BaselineRates,
    overrides: OverrideIndex,
) -> Dict[str, CurrencyAmount]:
    projected: Dict[str, CurrencyAmount] = {}

    def include(category: str, amount: CurrencyAmount) -> None:
        if not amount.is_zero():
            projected[category] = amount

    # Priority per settings category: override, settings baseline, historical average.
    for category, configured in setting_baselines.items():
        override = overrides.expense_override(month, category)
        if override is not None:
            include(category, override.as_amount())
        elif configured is not None:
            include(category, configured.copy())
        elif category in baselines.expenses_by_category:
            include(category, baselines.expenses_by_category[category].copy())

    # Historical spend fills any category still missing, including settings that
    # resolved to zero. An explicit override always has the final word.
    for category, average in baselines.expenses_by_category.items():
        if category in projected:
            continue
        override = overrides.expense_override(month, category)
        include(category, override.as_amount() if override is not None else average.copy())

    for category in overrides.expense_categories(month):
        if category in projected or category in baselines.expenses_by_category:
            continue
        override = overrides.expense_override(month, category)
        if override is not None:
            include(category, override.as_amount())

    return projected


def emit_forecasts(
    as_of: date,
    months: int,
    snapshots: Mapping[str, MonthlySnapshot],
    baselines: BaselineRates,
    settings: Sequence[ForecastSettingRecord],
    overrides: OverrideIndex,
    skipped: SkippedRecords,
) -> List[MonthlyForecast]:
    setting_baselines = _setting_baselines(settings, skipped)
    first_month = month_start(as_of)
    forecasts: List[MonthlyForecast] = []

    for index in range(months):
        month = add_months(first_month, index)

        course_revenue = baselines.course_revenue.copy()
        income_override = overrides.income_override(month)
        if income_override is not None:
            course_revenue = income_override.as_amount()
        # Subscriptions are a forward-looking run-rate, not smoothed history.
        membership_revenue = baselines.mrr.copy()
        income = course_revenue.add(membership_revenue)

        expenses_by_category = _project_expenses(month, setting_baselines, baselines, overrides)
        expenses = CurrencyAmount.total(expenses_by_category.values())

        forecasts.append(
            MonthlyForecast(
                month=month,
                income=income,
                expenses=expenses,
                profit_loss=income.subtract(expenses),
                course_revenue=course_revenue,
                membership_revenue=membership_revenue,
                expenses_by_category=expenses_by_category,
                # Only the in-progress month can already hold partial actuals.
                is_actual=index == 0 and month_key(month) in snapshots,
                has_override=overrides.has_override(month),
            )
        )
    return forecasts


def generate_forecast(
    repository: ForecastRepository,
    as_of: date,
    months: int = DEFAULT_MONTHS,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
    baseline_months: int = DEFAULT_BASELINE_MONTHS,
) -> ForecastResult:
    """Build the forecast for ``months`` months starting at the month of ``as_of``.

    Raises DataAccessError if any repository read fails; no partial result is
    produced in that case.
    """
    if months < 1:
        raise ValueError("months must be at least 1")
    logger.info("Generating %d-month forecast as of %s", months, as_of.isoformat())

    since = lookback_start(as_of, lookback_months)
    orders = repository.completed_orders_since(since)
    transactions = repository.expense_transactions_since(since)
    subscriptions = repository.active_subscriptions()
    settings = repository.forecast_settings()
    override_rows = repository.forecast_overrides()

    skipped = SkippedRecords()
    snapshots = aggregate_history(orders, transactions, skipped)
    baselines = compute_baselines(snapshots, subscriptions, as_of, skipped, window=baseline_months)
    overrides = OverrideIndex(override_rows, skipped)
    forecasts = emit_forecasts(as_of, months, snapshots, baselines, settings, overrides, skipped)

    skipped.log_summary()
    return ForecastResult(forecasts=forecasts, baselines=baselines, skipped=skipped)
