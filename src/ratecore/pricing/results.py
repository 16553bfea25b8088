"""Pricing results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CurrencyAmount:
    """An amount of money in a given currency."""

    currency: str
    amount: float

    def __add__(self, other: "CurrencyAmount") -> "CurrencyAmount":
        if not isinstance(other, CurrencyAmount):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(f"Cannot add {other.currency} to {self.currency}")
        return CurrencyAmount(self.currency, self.amount + other.amount)

    def __mul__(self, factor: float) -> "CurrencyAmount":
        return CurrencyAmount(self.currency, self.amount * factor)

    __rmul__ = __mul__


__all__ = ["CurrencyAmount"]
