"""Bank transactions, expense forecast settings and manual overrides."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from encore.core.users.models import TimestampMixin
from encore.extensions import db


class FinancialTransaction(db.Model, TimestampMixin):
    """Transaction synced from a payment provider; negative amounts are debits."""

    __tablename__ = "finance_transaction"
    __table_args__ = (
        db.UniqueConstraint("source", "external_transaction_id", name="uq_finance_transaction_source_external"),
        db.Index("ix_finance_transaction_date", "transaction_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    source: Mapped[str] = mapped_column(db.String(32), nullable=False)
    external_transaction_id: Mapped[str] = mapped_column(db.String(128), nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(db.Numeric(12, 2), nullable=False)
    currency: Mapped[str | None] = mapped_column(db.String(8), default="GBP")
    description: Mapped[str | None] = mapped_column(db.Text)
    merchant_name: Mapped[str | None] = mapped_column(db.String(255))

    category: Mapped["TransactionCategory | None"] = relationship(
        "TransactionCategory", back_populates="transaction", uselist=False, cascade="all, delete-orphan"
    )


class TransactionCategory(db.Model):
    __tablename__ = "finance_transaction_category"
    __table_args__ = (db.Index("ix_finance_transaction_category_category", "category"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_id: Mapped[int] = mapped_column(
        db.ForeignKey("finance_transaction.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    category: Mapped[str] = mapped_column(db.String(64), nullable=False)
    is_auto_categorized: Mapped[bool] = mapped_column(default=False)
    notes: Mapped[str | None] = mapped_column(db.Text)
    categorized_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    transaction: Mapped[FinancialTransaction] = relationship("FinancialTransaction", back_populates="category")


class ExpenseForecastSetting(db.Model, TimestampMixin):
    __tablename__ = "finance_expense_forecast_setting"

    id: Mapped[int] = mapped_column(primary_key=True)
    category: Mapped[str] = mapped_column(db.String(64), unique=True, nullable=False)
    frequency: Mapped[str] = mapped_column(db.String(16), nullable=False, default="monthly")
    expense_type: Mapped[str] = mapped_column(db.String(16), nullable=False, default="fixed")
    baseline_amount: Mapped[Decimal | None] = mapped_column(db.Numeric(12, 2))
    baseline_currency: Mapped[str | None] = mapped_column(db.String(8), default="GBP")
    notes: Mapped[str | None] = mapped_column(db.Text)


class ForecastOverride(db.Model):
    __tablename__ = "finance_forecast_override"
    __table_args__ = (
        db.UniqueConstraint(
            "forecast_month", "category", "override_type", name="uq_finance_forecast_override_cell"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # First day of the month
    forecast_month: Mapped[date] = mapped_column(nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(db.String(64))
    override_type: Mapped[str] = mapped_column(db.String(16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(db.Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(db.String(8), nullable=False, default="GBP")
    is_baseline: Mapped[bool] = mapped_column(default=False)
    notes: Mapped[str | None] = mapped_column(db.Text)
    created_by: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
