"""Management of expense forecast settings and manual overrides."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from encore.domains.finance.models.forecast_models import ExpenseForecastSetting, ForecastOverride
from encore.domains.finance.services.errors import DataAccessError
from encore.domains.finance.services.history_service import month_start
from encore.domains.finance.services.override_service import EXPENSE, INCOME
from encore.extensions import db

logger = logging.getLogger(__name__)


def _commit(source: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Failed to write %s", source)
        raise DataAccessError(source) from exc


def list_settings() -> List[ExpenseForecastSetting]:
    return ExpenseForecastSetting.query.order_by(ExpenseForecastSetting.category.asc()).all()


def upsert_setting(
    category: str,
    frequency: str = "monthly",
    expense_type: str = "fixed",
    baseline_amount: Optional[Decimal] = None,
    baseline_currency: Optional[str] = "GBP",
    notes: Optional[str] = None,
) -> ExpenseForecastSetting:
    setting = ExpenseForecastSetting.query.filter_by(category=category).first()
    if setting is None:
        setting = ExpenseForecastSetting(category=category)
        db.session.add(setting)
    setting.frequency = frequency
    setting.expense_type = expense_type
    setting.baseline_amount = baseline_amount
    setting.baseline_currency = (baseline_currency or "GBP").upper()
    setting.notes = notes
    _commit("expense_forecast_settings")
    logger.info("Saved forecast setting for %s (%s)", category, frequency)
    return setting


def delete_setting(category: str) -> bool:
    setting = ExpenseForecastSetting.query.filter_by(category=category).first()
    if setting is None:
        return False
    db.session.delete(setting)
    _commit("expense_forecast_settings")
    return True


def list_overrides(month: Optional[date] = None) -> List[ForecastOverride]:
    query = ForecastOverride.query
    if month is not None:
        query = query.filter(ForecastOverride.forecast_month == month_start(month))
    return query.order_by(ForecastOverride.forecast_month.asc(), ForecastOverride.id.asc()).all()


def upsert_override(
    forecast_month: date,
    override_type: str,
    amount: Decimal,
    category: Optional[str] = None,
    currency: Optional[str] = "GBP",
    notes: Optional[str] = None,
    created_by: Optional[int] = None,
) -> ForecastOverride:
    """Create or replace the override for one (month, category, type) cell."""
    if override_type == INCOME and category:
        raise ValueError("income overrides apply to course revenue and take no category")
    if override_type == EXPENSE and not category:
        raise ValueError("expense overrides require a category")
    if override_type not in (INCOME, EXPENSE):
        raise ValueError(f"unknown override type: {override_type}")

    month = month_start(forecast_month)
    query = ForecastOverride.query.filter(
        ForecastOverride.forecast_month == month,
        ForecastOverride.override_type == override_type,
    )
    if category is None:
        query = query.filter(ForecastOverride.category.is_(None))
    else:
        query = query.filter(ForecastOverride.category == category)
    override = query.first()
    if override is None:
        override = ForecastOverride(forecast_month=month, category=category, override_type=override_type)
        db.session.add(override)
    override.amount = amount
    override.currency = (currency or "GBP").upper()
    override.notes = notes
    override.created_by = created_by
    _commit("forecast_overrides")
    logger.info("Saved %s override for %s/%s", override_type, month.isoformat(), category or "-")
    return override


def delete_override(override_id: int) -> bool:
    override = db.session.get(ForecastOverride, override_id)
    if override is None:
        return False
    db.session.delete(override)
    _commit("forecast_overrides")
    return True
