"""
Currency value types.

Provides:
- CurrencyPair: ordered base/counter pair such as EUR/USD
- CurrencyAmount: an amount in a single currency
- MultiCurrencyAmount: immutable bag of amounts keyed by currency

Currencies are plain ISO codes ("USD", "EUR").
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple, Union


@dataclass(frozen=True)
class CurrencyPair:
    """
    An ordered pair of currencies.

    A rate quoted for the pair is the number of counter units for one base unit.
    """
    base: str
    counter: str

    def __post_init__(self):
        if self.base == self.counter:
            raise ValueError(f"Currency pair must have distinct currencies: {self.base}")

    @classmethod
    def of(cls, base: str, counter: str) -> "CurrencyPair":
        return cls(base.upper(), counter.upper())

    @classmethod
    def parse(cls, text: str) -> "CurrencyPair":
        """Parse 'EUR/USD' format."""
        parts = text.strip().upper().split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid currency pair: {text}")
        return cls(parts[0], parts[1])

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(self.counter, self.base)

    def is_inverse(self, other: "CurrencyPair") -> bool:
        return self.base == other.counter and self.counter == other.base

    def contains(self, currency: str) -> bool:
        return currency in (self.base, self.counter)

    def other(self, currency: str) -> str:
        """The currency of the pair that is not the given one."""
        if currency == self.base:
            return self.counter
        if currency == self.counter:
            return self.base
        raise ValueError(f"Currency {currency} not in pair {self}")

    def __str__(self) -> str:
        return f"{self.base}/{self.counter}"


@dataclass(frozen=True)
class CurrencyAmount:
    """An amount of money in one currency."""
    currency: str
    amount: float

    @classmethod
    def zero(cls, currency: str) -> "CurrencyAmount":
        return cls(currency, 0.0)

    def plus(self, other: Union["CurrencyAmount", float]) -> "CurrencyAmount":
        if isinstance(other, CurrencyAmount):
            if other.currency != self.currency:
                raise ValueError(f"Currency mismatch: {self.currency} and {other.currency}")
            return CurrencyAmount(self.currency, self.amount + other.amount)
        return CurrencyAmount(self.currency, self.amount + other)

    def minus(self, other: Union["CurrencyAmount", float]) -> "CurrencyAmount":
        if isinstance(other, CurrencyAmount):
            return self.plus(other.negated())
        return self.plus(-other)

    def multiplied_by(self, factor: float) -> "CurrencyAmount":
        return CurrencyAmount(self.currency, self.amount * factor)

    def negated(self) -> "CurrencyAmount":
        return CurrencyAmount(self.currency, -self.amount)

    def convert_to(self, currency: str, rate: float) -> "CurrencyAmount":
        """Convert using a rate expressed as target units per unit of this currency."""
        if currency == self.currency:
            return self
        return CurrencyAmount(currency, self.amount * rate)


@dataclass(frozen=True)
class MultiCurrencyAmount:
    """
    Amounts in several currencies, at most one amount per currency.

    Instances are immutable; arithmetic returns new instances.
    """
    amounts: Tuple[CurrencyAmount, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "MultiCurrencyAmount":
        return cls()

    @classmethod
    def of(cls, *amounts: CurrencyAmount) -> "MultiCurrencyAmount":
        return cls.empty().plus_all(amounts)

    @classmethod
    def from_dict(cls, amounts: Mapping[str, float]) -> "MultiCurrencyAmount":
        return cls.of(*(CurrencyAmount(ccy, amt) for ccy, amt in amounts.items()))

    def _as_dict(self) -> Dict[str, float]:
        return {ca.currency: ca.amount for ca in self.amounts}

    @property
    def currencies(self) -> List[str]:
        return [ca.currency for ca in self.amounts]

    def contains(self, currency: str) -> bool:
        return currency in self._as_dict()

    def get_amount(self, currency: str) -> CurrencyAmount:
        """Amount in the currency, zero when absent."""
        return CurrencyAmount(currency, self._as_dict().get(currency, 0.0))

    def plus(self, other: Union[CurrencyAmount, "MultiCurrencyAmount"]) -> "MultiCurrencyAmount":
        if isinstance(other, MultiCurrencyAmount):
            return self.plus_all(other.amounts)
        return self.plus_all([other])

    def plus_all(self, others: Iterable[CurrencyAmount]) -> "MultiCurrencyAmount":
        merged = self._as_dict()
        for ca in others:
            merged[ca.currency] = merged.get(ca.currency, 0.0) + ca.amount
        return MultiCurrencyAmount(tuple(CurrencyAmount(c, merged[c]) for c in sorted(merged)))

    def multiplied_by(self, factor: float) -> "MultiCurrencyAmount":
        return MultiCurrencyAmount(tuple(ca.multiplied_by(factor) for ca in self.amounts))

    def __iter__(self) -> Iterator[CurrencyAmount]:
        return iter(self.amounts)

    def __len__(self) -> int:
        return len(self.amounts)


__all__ = [
    "CurrencyPair",
    "CurrencyAmount",
    "MultiCurrencyAmount",
]
