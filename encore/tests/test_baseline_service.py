from datetime import date, datetime
from decimal import Decimal

import pytest

from encore.domains.finance.services.baseline_service import (
    PlanType,
    baseline_month_keys,
    compute_baselines,
    monthly_recurring_revenue,
)
from encore.domains.finance.services.data_quality import (
    UNSUPPORTED_CURRENCY,
    UNSUPPORTED_PLAN_TYPE,
    SkippedRecords,
)
from encore.domains.finance.services.forecast_repository import SubscriptionRecord
from encore.domains.finance.services.history_service import aggregate_history
from encore.tests.fakes import expense, order

pytestmark = pytest.mark.unit

AS_OF = date(2025, 6, 15)


def test_baseline_window_excludes_current_month():
    assert baseline_month_keys(AS_OF) == ["2025-05", "2025-04", "2025-03"]
    assert baseline_month_keys(date(2025, 1, 2), window=2) == ["2024-12", "2024-11"]


def test_average_divides_by_months_with_data_only():
    skipped = SkippedRecords()
    snapshots = aggregate_history(
        [
            order(datetime(2025, 5, 3), 100),
            order(datetime(2025, 3, 20), 200),
            # Current month and out-of-window months are ignored.
            order(datetime(2025, 6, 1), 5000),
            order(datetime(2025, 2, 1), 7000),
        ],
        [expense(datetime(2025, 5, 10), Decimal("-60"), "rent_rates")],
        skipped,
    )
    rates = compute_baselines(snapshots, [], AS_OF, skipped)
    assert rates.months_with_data == 2
    assert rates.course_revenue["USD"] == Decimal("150")
    assert rates.expenses_by_category["rent_rates"]["GBP"] == Decimal("30")


def test_no_history_yields_zero_rates():
    rates = compute_baselines({}, [], AS_OF, SkippedRecords())
    assert rates.months_with_data == 0
    assert rates.course_revenue.is_zero()
    assert rates.membership_revenue.is_zero()
    assert dict(rates.expenses_by_category) == {}


def test_mrr_normalizes_annual_plans():
    mrr = monthly_recurring_revenue(
        [
            SubscriptionRecord(amount=Decimal("30"), currency="USD", plan_type="monthly"),
            SubscriptionRecord(amount=Decimal("1200"), currency="GBP", plan_type="Annual"),
            SubscriptionRecord(amount=None, currency=None, plan_type="monthly"),
        ],
        SkippedRecords(),
    )
    assert mrr["USD"] == Decimal("30")
    assert mrr["GBP"] == Decimal("100")


def test_mrr_counts_unsupported_plans_and_currencies(caplog):
    skipped = SkippedRecords()
    with caplog.at_level("WARNING"):
        mrr = monthly_recurring_revenue(
            [
                SubscriptionRecord(amount=Decimal("10"), currency="USD", plan_type="weekly"),
                SubscriptionRecord(amount=Decimal("10"), currency="AUD", plan_type="monthly"),
            ],
            skipped,
        )
    assert mrr.is_zero()
    assert skipped.count("subscriptions", UNSUPPORTED_PLAN_TYPE) == 1
    assert skipped.count("subscriptions", UNSUPPORTED_CURRENCY) == 1
    assert "weekly" in caplog.text


def test_plan_type_parse():
    assert PlanType.parse(" MONTHLY ") is PlanType.MONTHLY
    assert PlanType.parse(None) is None
    assert PlanType.ANNUAL.monthly_equivalent(Decimal("120")) == Decimal("10")


def test_baselines_to_dict_uses_camel_case():
    rates = compute_baselines({}, [], AS_OF, SkippedRecords())
    assert set(rates.to_dict()) == {
        "avgCourseRevenue",
        "avgMembershipRevenue",
        "mrrBaseline",
        "avgExpensesByCategory",
        "monthsWithData",
    }
