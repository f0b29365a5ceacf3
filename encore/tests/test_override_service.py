from datetime import date
from decimal import Decimal

import pytest

from encore.domains.finance.services.data_quality import UNSUPPORTED_CURRENCY, SkippedRecords
from encore.domains.finance.services.forecast_repository import OverrideRecord
from encore.domains.finance.services.override_service import OverrideIndex, override_key

pytestmark = pytest.mark.unit


def _override(month, override_type, amount, category=None, currency="GBP"):
    return OverrideRecord(
        forecast_month=month,
        category=category,
        override_type=override_type,
        amount=Decimal(str(amount)),
        currency=currency,
    )


def test_override_key_normalizes_month():
    assert override_key(date(2025, 7, 19), None, "income") == "2025-07-01-null-income"
    assert override_key(date(2025, 7, 1), "rent_rates", "expense") == "2025-07-01-rent_rates-expense"


def test_income_and_expense_lookup():
    index = OverrideIndex(
        [
            _override(date(2025, 7, 1), "income", 900),
            _override(date(2025, 7, 10), "expense", 45, category="consultancy", currency="usd"),
        ],
        SkippedRecords(),
    )
    income = index.income_override(date(2025, 7, 1))
    assert income.as_amount().to_dict() == {"GBP": 900.0, "USD": 0.0, "EUR": 0.0}
    cost = index.expense_override(date(2025, 7, 1), "consultancy")
    assert cost.as_amount()["USD"] == Decimal("45")
    assert index.expense_override(date(2025, 7, 1), "rent_rates") is None
    assert index.income_override(date(2025, 8, 1)) is None
    assert index.expense_categories(date(2025, 7, 1)) == ["consultancy"]


def test_has_override_matches_month_prefix_only():
    index = OverrideIndex([_override(date(2025, 9, 1), "expense", 5, category="donations")], SkippedRecords())
    assert index.has_override(date(2025, 9, 1))
    assert not index.has_override(date(2025, 10, 1))


def test_unsupported_currency_marks_month_but_never_substitutes():
    skipped = SkippedRecords()
    index = OverrideIndex([_override(date(2025, 9, 1), "income", 500, currency="JPY")], skipped)
    assert index.has_override(date(2025, 9, 1))
    assert index.income_override(date(2025, 9, 1)) is None
    assert skipped.count("forecast_overrides", UNSUPPORTED_CURRENCY) == 1
