"""Pydantic schemas for forecast endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ExpenseCategory = Literal[
    "directors_employees_subcontractor",
    "tutor_commissions",
    "legal_professional",
    "accountancy_audit",
    "consultancy",
    "property_costs",
    "rent_rates",
    "repairs_maintenance",
    "advertising_promotions",
    "bank_financial_charges",
    "travel_subsistence",
    "admin_office",
    "software_subscriptions",
    "donations",
]
CurrencyCode = Literal["GBP", "USD", "EUR"]


class ForecastParams(BaseModel):
    months: Optional[int] = Field(default=None, ge=1)


class ForecastSettingUpsert(BaseModel):
    category: ExpenseCategory
    frequency: Literal["monthly", "annual", "one_time"] = "monthly"
    expense_type: Literal["fixed", "variable", "scalable"] = "fixed"
    baseline_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    baseline_currency: CurrencyCode = "GBP"
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("baseline_currency", mode="before")
    @classmethod
    def normalize_currency(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class ForecastSettingResponse(BaseModel):
    id: int
    category: str
    frequency: str
    expense_type: str
    baseline_amount: Optional[float]
    baseline_currency: Optional[str]
    notes: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class ForecastOverrideCreate(BaseModel):
    forecast_month: date
    override_type: Literal["income", "expense"]
    category: Optional[ExpenseCategory] = None
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    currency: CurrencyCode = "GBP"
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class ForecastOverrideQuery(BaseModel):
    month: Optional[date] = None


class ForecastOverrideResponse(BaseModel):
    id: int
    forecast_month: date
    category: Optional[str]
    override_type: str
    amount: float
    currency: str
    notes: Optional[str]

    model_config = ConfigDict(from_attributes=True)
