"""Per-currency amounts for multi-currency reporting."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Union

Number = Union[Decimal, int, float, str]


class Currency(str, Enum):
    GBP = "GBP"
    USD = "USD"
    EUR = "EUR"

    @classmethod
    def parse(cls, code: Optional[str], default: "Currency") -> Optional["Currency"]:
        """Upper-cased lookup; missing codes take ``default``, unknown ones give None."""
        if not code:
            return default
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None


def to_decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from expanding to binary noise
    return Decimal(str(value))


class CurrencyAmount:
    """Fixed GBP/USD/EUR slots. Immutable; arithmetic returns new instances."""

    __slots__ = ("_slots",)

    def __init__(self, values: Optional[Mapping[Union[Currency, str], Number]] = None):
        self._slots: Dict[Currency, Decimal] = {currency: Decimal("0") for currency in Currency}
        for key, amount in (values or {}).items():
            self._slots[Currency(key)] = to_decimal(amount)

    @classmethod
    def zero(cls) -> "CurrencyAmount":
        return cls()

    @classmethod
    def single(cls, currency: Currency, amount: Number) -> "CurrencyAmount":
        return cls({currency: amount})

    @classmethod
    def total(cls, amounts: Iterable["CurrencyAmount"]) -> "CurrencyAmount":
        result = cls()
        for amount in amounts:
            result = result.add(amount)
        return result

    def __getitem__(self, currency: Union[Currency, str]) -> Decimal:
        return self._slots[Currency(currency)]

    def add(self, other: "CurrencyAmount") -> "CurrencyAmount":
        return CurrencyAmount({c: self._slots[c] + other._slots[c] for c in Currency})

    def subtract(self, other: "CurrencyAmount") -> "CurrencyAmount":
        return CurrencyAmount({c: self._slots[c] - other._slots[c] for c in Currency})

    def scale(self, divisor: Number) -> "CurrencyAmount":
        divisor = to_decimal(divisor)
        if divisor == 0:
            return CurrencyAmount()
        return CurrencyAmount({c: self._slots[c] / divisor for c in Currency})

    def copy(self) -> "CurrencyAmount":
        return CurrencyAmount(self._slots)

    def is_zero(self) -> bool:
        return all(value == 0 for value in self._slots.values())

    def to_dict(self) -> Dict[str, float]:
        return {currency.value: float(value) for currency, value in self._slots.items()}

    __add__ = add
    __sub__ = subtract

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CurrencyAmount):
            return NotImplemented
        return self._slots == other._slots

    def __hash__(self) -> int:
        return hash(tuple(self._slots[c] for c in Currency))

    def __repr__(self) -> str:
        inner = ", ".join(f"{c.value}={self._slots[c]}" for c in Currency)
        return f"CurrencyAmount({inner})"
