from datetime import date

import pytest

pytestmark = pytest.mark.integration

from encore.domains.finance.models.forecast_models import ExpenseForecastSetting, ForecastOverride
from encore.domains.finance.services.history_service import month_start
from encore.extensions import db

SETTINGS_URL = "/api/finance/forecast/settings"
OVERRIDES_URL = "/api/finance/forecast/overrides"


def test_setting_upsert_list_and_delete(client, admin_headers):
    resp = client.put(
        f"{SETTINGS_URL}/software_subscriptions",
        json={"frequency": "annual", "baseline_amount": "120.00", "baseline_currency": "gbp"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    setting = resp.get_json()["setting"]
    assert setting["category"] == "software_subscriptions"
    assert setting["baseline_amount"] == 120.0
    assert setting["baseline_currency"] == "GBP"
    assert setting["expense_type"] == "fixed"

    resp = client.put(
        f"{SETTINGS_URL}/software_subscriptions",
        json={"frequency": "monthly", "baseline_amount": "15"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert ExpenseForecastSetting.query.count() == 1

    listing = client.get(SETTINGS_URL, headers=admin_headers).get_json()["settings"]
    assert [(s["category"], s["frequency"]) for s in listing] == [("software_subscriptions", "monthly")]

    assert client.delete(f"{SETTINGS_URL}/software_subscriptions", headers=admin_headers).status_code == 200
    resp = client.delete(f"{SETTINGS_URL}/software_subscriptions", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


@pytest.mark.parametrize(
    "category,payload",
    [
        ("pizza", {"frequency": "monthly"}),
        ("rent_rates", {"frequency": "fortnightly"}),
        ("rent_rates", {"baseline_amount": "-5"}),
        ("rent_rates", {"baseline_currency": "JPY"}),
    ],
)
def test_setting_validation(client, admin_headers, category, payload):
    resp = client.put(f"{SETTINGS_URL}/{category}", json=payload, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_override_upsert_normalizes_month_and_replaces_cell(client, admin_headers, admin_user):
    payload = {"forecast_month": "2025-07-15", "override_type": "expense", "category": "consultancy", "amount": "45"}
    first = client.post(OVERRIDES_URL, json=payload, headers=admin_headers)
    assert first.status_code == 200
    override = first.get_json()["override"]
    assert override["forecast_month"] == "2025-07-01"
    assert override["currency"] == "GBP"

    second = client.post(OVERRIDES_URL, json=payload | {"amount": "60.50"}, headers=admin_headers)
    assert second.get_json()["override"]["id"] == override["id"]
    assert second.get_json()["override"]["amount"] == 60.5
    stored = db.session.get(ForecastOverride, override["id"])
    assert stored.created_by == admin_user.id


def test_income_and_expense_overrides_for_same_month_coexist(client, admin_headers):
    base = {"forecast_month": "2025-09-01", "amount": "100"}
    assert client.post(OVERRIDES_URL, json=base | {"override_type": "income"}, headers=admin_headers).status_code == 200
    assert (
        client.post(
            OVERRIDES_URL, json=base | {"override_type": "expense", "category": "donations"}, headers=admin_headers
        ).status_code
        == 200
    )
    listing = client.get(f"{OVERRIDES_URL}?month=2025-09-20", headers=admin_headers).get_json()["overrides"]
    assert sorted((o["override_type"], o["category"]) for o in listing) == [
        ("expense", "donations"),
        ("income", None),
    ]
    assert client.get(f"{OVERRIDES_URL}?month=2025-10-01", headers=admin_headers).get_json()["overrides"] == []


@pytest.mark.parametrize(
    "payload",
    [
        {"forecast_month": "2025-07-01", "override_type": "income", "category": "consultancy", "amount": "1"},
        {"forecast_month": "2025-07-01", "override_type": "expense", "amount": "1"},
        {"forecast_month": "2025-07-01", "override_type": "refund", "amount": "1"},
        {"forecast_month": "July", "override_type": "income", "amount": "1"},
    ],
)
def test_override_validation(client, admin_headers, payload):
    resp = client.post(OVERRIDES_URL, json=payload, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_override_query_rejects_bad_month(client, admin_headers):
    assert client.get(f"{OVERRIDES_URL}?month=someday", headers=admin_headers).status_code == 400


def test_override_delete(client, admin_headers):
    created = client.post(
        OVERRIDES_URL,
        json={"forecast_month": "2025-07-01", "override_type": "income", "amount": "10"},
        headers=admin_headers,
    ).get_json()["override"]
    assert client.delete(f"{OVERRIDES_URL}/{created['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"{OVERRIDES_URL}/{created['id']}", headers=admin_headers).status_code == 404


def test_saved_override_shows_in_forecast(client, admin_headers):
    this_month = month_start(date.today())
    client.post(
        OVERRIDES_URL,
        json={"forecast_month": this_month.isoformat(), "override_type": "income", "amount": "750", "currency": "EUR"},
        headers=admin_headers,
    )
    client.put(f"{SETTINGS_URL}/rent_rates", json={"baseline_amount": "400"}, headers=admin_headers)

    forecasts = client.get("/api/finance/forecast?months=2", headers=admin_headers).get_json()["forecasts"]
    assert forecasts[0]["hasOverride"] is True
    assert forecasts[0]["breakdown"]["courseRevenue"]["EUR"] == 750.0
    assert forecasts[1]["hasOverride"] is False
    assert forecasts[1]["breakdown"]["courseRevenue"]["EUR"] == 0.0
    assert forecasts[1]["expenses"]["GBP"] == 400.0
    assert forecasts[1]["profitLoss"]["GBP"] == -400.0


def test_member_cannot_manage_settings(client, member_headers):
    resp = client.put(f"{SETTINGS_URL}/rent_rates", json={"baseline_amount": "1"}, headers=member_headers)
    assert resp.status_code == 403
    assert client.get(OVERRIDES_URL, headers=member_headers).status_code == 403


def test_mutations_require_csrf_token_when_enabled(app, client, admin_headers):
    app.config["WTF_CSRF_ENABLED"] = True
    resp = client.put(f"{SETTINGS_URL}/rent_rates", json={"baseline_amount": "1"}, headers=admin_headers)
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "csrf_failed"

    token = client.get("/api/finance/forecast/csrf-token", headers=admin_headers).get_json()["csrf_token"]
    resp = client.put(
        f"{SETTINGS_URL}/rent_rates",
        json={"baseline_amount": "1"},
        headers=admin_headers | {"X-CSRF-Token": token},
    )
    assert resp.status_code == 200
