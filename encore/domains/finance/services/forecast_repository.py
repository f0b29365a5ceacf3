"""Read access to the rows a forecast run consumes."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from encore.domains.commerce.models.order_models import Order, Subscription
from encore.domains.finance.models.forecast_models import (
    ExpenseForecastSetting,
    FinancialTransaction,
    ForecastOverride,
)
from encore.domains.finance.services.errors import DataAccessError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderRecord:
    created_at: datetime
    amount: Optional[Decimal]
    currency: Optional[str]
    product_type: Optional[str]


@dataclass(frozen=True)
class TransactionRecord:
    transaction_date: datetime
    amount: Decimal
    currency: Optional[str]
    category: Optional[str]


@dataclass(frozen=True)
class SubscriptionRecord:
    amount: Optional[Decimal]
    currency: Optional[str]
    plan_type: Optional[str]


@dataclass(frozen=True)
class ForecastSettingRecord:
    category: str
    baseline_amount: Optional[Decimal]
    baseline_currency: Optional[str]
    frequency: str


@dataclass(frozen=True)
class OverrideRecord:
    forecast_month: date
    category: Optional[str]
    override_type: str
    amount: Decimal
    currency: Optional[str]


class ForecastRepository(ABC):
    """Typed queries backing forecast generation."""

    @abstractmethod
    def completed_orders_since(self, since: date) -> List[OrderRecord]:
        """Completed orders created on or after ``since``."""

    @abstractmethod
    def expense_transactions_since(self, since: date) -> List[TransactionRecord]:
        """Transactions dated on or after ``since`` with their category, if any."""

    @abstractmethod
    def active_subscriptions(self) -> List[SubscriptionRecord]:
        """Subscriptions currently in the active state."""

    @abstractmethod
    def forecast_settings(self) -> List[ForecastSettingRecord]:
        """Per-category expense settings."""

    @abstractmethod
    def forecast_overrides(self) -> List[OverrideRecord]:
        """All manual overrides."""


def _start_of(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


class SqlAlchemyForecastRepository(ForecastRepository):
    """ForecastRepository over the application database."""

    def __init__(self, session: Session):
        self.session = session

    def _fetch(self, source: str, stmt):
        try:
            return self.session.execute(stmt).unique().scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to read %s for forecast", source)
            raise DataAccessError(source) from exc

    def completed_orders_since(self, since: date) -> List[OrderRecord]:
        stmt = (
            select(Order)
            .options(joinedload(Order.product))
            .where(Order.status == "completed", Order.created_at >= _start_of(since))
            .order_by(Order.created_at.asc())
        )
        return [
            OrderRecord(
                created_at=order.created_at,
                amount=order.amount,
                currency=order.currency,
                product_type=order.product.product_type if order.product else None,
            )
            for order in self._fetch("orders", stmt)
        ]

    def expense_transactions_since(self, since: date) -> List[TransactionRecord]:
        stmt = (
            select(FinancialTransaction)
            .options(joinedload(FinancialTransaction.category))
            .where(FinancialTransaction.transaction_date >= _start_of(since))
            .order_by(FinancialTransaction.transaction_date.asc())
        )
        return [
            TransactionRecord(
                transaction_date=tx.transaction_date,
                amount=tx.amount,
                currency=tx.currency,
                category=tx.category.category if tx.category else None,
            )
            for tx in self._fetch("financial_transactions", stmt)
        ]

    def active_subscriptions(self) -> List[SubscriptionRecord]:
        stmt = select(Subscription).where(Subscription.status == "active")
        return [
            SubscriptionRecord(amount=sub.amount, currency=sub.currency, plan_type=sub.plan_type)
            for sub in self._fetch("subscriptions", stmt)
        ]

    def forecast_settings(self) -> List[ForecastSettingRecord]:
        stmt = select(ExpenseForecastSetting).order_by(ExpenseForecastSetting.category.asc())
        return [
            ForecastSettingRecord(
                category=row.category,
                baseline_amount=row.baseline_amount,
                baseline_currency=row.baseline_currency,
                frequency=row.frequency,
            )
            for row in self._fetch("expense_forecast_settings", stmt)
        ]

    def forecast_overrides(self) -> List[OverrideRecord]:
        stmt = select(ForecastOverride).order_by(ForecastOverride.forecast_month.asc())
        return [
            OverrideRecord(
                forecast_month=row.forecast_month,
                category=row.category,
                override_type=row.override_type,
                amount=row.amount,
                currency=row.currency,
            )
            for row in self._fetch("forecast_overrides", stmt)
        ]
