from dataclasses import FrozenInstanceError
from datetime import date, datetime
from decimal import Decimal

import pytest

from encore.domains.finance.services.currency import Currency, CurrencyAmount
from encore.domains.finance.services.data_quality import (
    EXCLUDED_CATEGORY,
    NON_DEBIT,
    UNCATEGORIZED,
    UNSUPPORTED_CURRENCY,
    SkippedRecords,
)
from encore.domains.finance.services.history_service import (
    add_months,
    aggregate_history,
    lookback_start,
    month_key,
)
from encore.tests.fakes import expense, order

pytestmark = pytest.mark.unit


def test_month_helpers():
    assert month_key(datetime(2025, 3, 31, 23, 59)) == "2025-03"
    assert add_months(date(2025, 1, 15), -1) == date(2024, 12, 1)
    assert add_months(date(2025, 11, 1), 3) == date(2026, 2, 1)
    assert lookback_start(date(2025, 6, 18), 6) == date(2024, 12, 1)


def test_orders_split_into_course_and_membership_revenue():
    skipped = SkippedRecords()
    snapshots = aggregate_history(
        [
            order(datetime(2025, 2, 3), 100, "USD", "course"),
            order(datetime(2025, 2, 9), 40, "usd", "membership"),
            order(datetime(2025, 2, 11), 10, None, "subscription"),
            order(datetime(2025, 2, 20), None, "GBP", None),
        ],
        [],
        skipped,
    )
    feb = snapshots["2025-02"]
    assert feb.course_revenue["USD"] == Decimal("100")
    assert feb.course_revenue["GBP"] == Decimal("0")
    # Missing currency defaults to USD.
    assert feb.membership_revenue["USD"] == Decimal("50")
    assert skipped.total == 0


def test_transactions_keep_only_categorized_debits():
    skipped = SkippedRecords()
    snapshots = aggregate_history(
        [],
        [
            expense(datetime(2025, 4, 1), Decimal("-25.50"), "software_subscriptions"),
            expense(datetime(2025, 4, 2), Decimal("-4.50"), "software_subscriptions"),
            expense(datetime(2025, 4, 3), Decimal("300"), "tutor_commissions"),
            expense(datetime(2025, 4, 4), Decimal("-12"), None),
            expense(datetime(2025, 4, 5), Decimal("-80"), "internal_transfer"),
            expense(datetime(2025, 4, 6), Decimal("-80"), "ignore"),
        ],
        skipped,
    )
    april = snapshots["2025-04"]
    assert set(april.expenses_by_category) == {"software_subscriptions"}
    assert april.expenses_by_category["software_subscriptions"]["GBP"] == Decimal("30.00")
    assert skipped.count("financial_transactions", NON_DEBIT) == 1
    assert skipped.count("financial_transactions", UNCATEGORIZED) == 1
    assert skipped.count("financial_transactions", EXCLUDED_CATEGORY) == 2


def test_rejected_rows_do_not_create_snapshots():
    skipped = SkippedRecords()
    snapshots = aggregate_history(
        [order(datetime(2025, 1, 10), 90, "JPY")],
        [expense(datetime(2025, 1, 12), Decimal("-5"), "admin_office", currency="CHF")],
        skipped,
    )
    assert dict(snapshots) == {}
    assert skipped.count("orders", UNSUPPORTED_CURRENCY) == 1
    assert skipped.count("financial_transactions", UNSUPPORTED_CURRENCY) == 1
    assert skipped.to_dict() == {
        "financial_transactions": {"unsupported_currency": 1},
        "orders": {"unsupported_currency": 1},
    }


def test_snapshot_map_is_read_only():
    snapshots = aggregate_history([order(datetime(2025, 5, 1), 1)], [], SkippedRecords())
    with pytest.raises(TypeError):
        snapshots["2025-06"] = None


def test_snapshots_are_frozen():
    snapshots = aggregate_history(
        [order(datetime(2025, 5, 1), 10)],
        [expense(datetime(2025, 5, 2), Decimal("-20"), "rent_rates")],
        SkippedRecords(),
    )
    may = snapshots["2025-05"]
    with pytest.raises(FrozenInstanceError):
        may.course_revenue = CurrencyAmount.single(Currency.USD, 999)
    with pytest.raises(TypeError):
        may.expenses_by_category["rent_rates"] = CurrencyAmount()
    assert may.course_revenue["USD"] == Decimal("10")
    assert may.expenses_by_category["rent_rates"]["GBP"] == Decimal("20")
