from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from fractions import Fraction
from typing import Any, Hashable, Iterable, Mapping, Union

CurrencyValue = Union["Currency", str, Mapping[str, Any]]
Ratios = Union[Mapping[Hashable, Any], Iterable[tuple[Hashable, Any]]]

# Enough digits for amount x rate products before they get quantized
_EXACT = Context(prec=60, rounding=ROUND_HALF_UP)
_HALF = Fraction(1, 2)


class CurrencyError(ValueError):
    """Money of different (or undefined) currencies mixed together."""


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency.

    exponent = number of digits after the decimal separator. The same code with
    another exponent is a different currency (EUR/2 != EUR/3).
    """
    code: str
    exponent: int = 2

    def __post_init__(self) -> None:
        if not isinstance(self.code, str) or not self.code.strip():
            raise CurrencyError(f"Invalid currency {self.code!r}")
        if isinstance(self.exponent, bool) or not isinstance(self.exponent, int) or self.exponent < 0:
            raise CurrencyError(f"Invalid exponent {self.exponent!r} for currency {self.code}")

    @classmethod
    def of(cls, value: CurrencyValue | None) -> "Currency":
        """
        Resolve a currency from a Currency, a code ("EUR", exponent 2)
        or a definition {"code": "XTS", "exponent": 8}.
        """
        if isinstance(value, Currency):
            return value
        if value is None:
            raise CurrencyError("Undefined currency")

        if isinstance(value, str):
            if not value.strip():
                raise CurrencyError("Undefined currency")
            return cls(code=value.strip())

        if isinstance(value, Mapping):
            code = value.get("code")
            if not code:
                raise CurrencyError("Undefined currency")
            exponent = value.get("exponent")
            return cls(code=code, exponent=2 if exponent is None else exponent)

        raise CurrencyError(f"Invalid currency {value!r}")

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.exponent)

    def __str__(self) -> str:
        return self.code


EUR = Currency("EUR")
USD = Currency("USD")
FIM = Currency("FIM")
DKK = Currency("DKK")
JPY = Currency("JPY", 0)


def parse_decimal(value: Any) -> Decimal:
    """
    Exact parse, floats included (through repr, so 0.1 stays 0.1).
    Accepts "12.34", "-12.34", "1_500", and "12,34".
    """
    if isinstance(value, bool):
        raise TypeError("Amount must be a number or a decimal string")

    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, int):
        dec = Decimal(value)
    elif isinstance(value, float):
        dec = Decimal(repr(value))
    elif isinstance(value, str):
        raw = value.strip()
        if raw == "":
            raise ValueError("Amount cannot be empty")

        raw = raw.replace(",", ".")

        try:
            dec = Decimal(raw)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid decimal amount: {value!r}") from exc
    else:
        raise TypeError(f"Amount must be a number or a decimal string, got {type(value).__name__}")

    if not dec.is_finite():
        raise ValueError(f"Invalid decimal amount: {value!r}")
    return dec


def _quantize(amount: Decimal, currency: Currency) -> Decimal:
    with localcontext(_EXACT):
        q = amount.quantize(currency.quantum, rounding=ROUND_HALF_UP)
    # -0.00 -> 0.00
    return q.copy_abs() if q.is_zero() else q


@dataclass(frozen=True, slots=True)
class Money:
    """
    Amount of money in a given currency (Fowler's Money pattern).

    The amount is always stored rounded to the currency exponent, and currencies
    are never mixed: adding EUR to USD raises CurrencyError.
    """
    amount: Decimal
    currency: Currency

    @classmethod
    def of(cls, amount: Any, currency: CurrencyValue | None) -> "Money":
        return cls(amount=parse_decimal(amount), currency=Currency.of(currency))

    @classmethod
    def from_value(cls, value: "Money | Mapping[str, Any]") -> "Money":
        """Money from its wire shape {"amount": "12.30", "currency": "EUR"}."""
        if isinstance(value, Money):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Expected a money value, got {type(value).__name__}")

        if not value.get("currency"):
            raise CurrencyError("Undefined currency")
        if value.get("amount") is None:
            raise ValueError("Undefined amount")
        return cls.of(value["amount"], value["currency"])

    @classmethod
    def zero(cls, currency: CurrencyValue) -> "Money":
        return cls(amount=Decimal(0), currency=Currency.of(currency))

    def __post_init__(self) -> None:
        if not isinstance(self.currency, Currency):
            raise CurrencyError("Undefined currency")

        if not isinstance(self.amount, Decimal):
            raise TypeError("Money.amount must be a Decimal")

        object.__setattr__(self, "amount", _quantize(self.amount, self.currency))

    def is_zero(self) -> bool:
        return self.amount.is_zero()

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other)
        return self._with_amount(self.amount + other.amount)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other)
        return self._with_amount(self.amount - other.amount)

    def __neg__(self) -> "Money":
        return self._with_amount(-self.amount)

    def __mul__(self, multiplier: Any) -> "Money":
        if isinstance(multiplier, Money):
            return NotImplemented
        with localcontext(_EXACT):
            return self._with_amount(self.amount * parse_decimal(multiplier))

    __rmul__ = __mul__

    def __truediv__(self, divider: Any) -> "Money":
        if isinstance(divider, Money):
            return NotImplemented
        with localcontext(_EXACT):
            return self._with_amount(self.amount / parse_decimal(divider))

    def convert_to(self, currency: CurrencyValue, rate: Any) -> "Money":
        """
        amount x rate, rounded to the exponent of *this* currency first and only
        then read as an amount of the target currency.
        """
        target = Currency.of(currency)
        with localcontext(_EXACT):
            converted = self.amount * parse_decimal(rate)
        return Money(amount=_quantize(converted, self.currency), currency=target)

    def allocate(self, ratios: Ratios) -> dict[Hashable, "Money"]:
        """
        Split the amount by the given ratios without losing a single minor unit.

        The ratios are ordered (key, weight) pairs, or a mapping in insertion
        order. Every key first gets the floor of its exact share; leftover units
        go to the keys whose share would round up on its own, then, if any are
        still left, one by one to the keys in order. allocate(1.00, {a: 1, b: 2})
        is therefore {a: 0.33, b: 0.67}, not Fowler's {a: 0.34, b: 0.66}, which
        keeps decades of repeated allocations from piling the cents on the
        oldest keys.
        """
        pairs = list(ratios.items()) if isinstance(ratios, Mapping) else list(ratios)
        if not pairs:
            raise ValueError("No ratios defined")

        keys = [key for key, _ in pairs]
        if len(set(keys)) != len(keys):
            raise ValueError("Allocation keys must be unique")

        weights = [Fraction(parse_decimal(weight)) for _, weight in pairs]
        if any(weight <= 0 for weight in weights):
            raise ValueError("Allocation ratios must be positive")
        sum_of_weights = sum(weights)

        # Work in minor units, e.g. cents
        units = int(self.amount.scaleb(self.currency.exponent))

        results: list[int] = []
        rounds_up: list[bool] = []
        for weight in weights:
            share = units * weight / sum_of_weights
            floor = math.floor(share)
            results.append(floor)
            rounds_up.append(share - floor >= _HALF)

        leftover = units - sum(results)

        for i, flagged in enumerate(rounds_up):
            if leftover <= 0:
                break
            if flagged:
                results[i] += 1
                leftover -= 1

        # Fewer round-ups than leftover units, e.g. 10.00 by [1, 1, 1]
        for i in range(leftover):
            results[i] += 1

        return {
            key: self._with_amount(Decimal(result).scaleb(-self.currency.exponent))
            for key, result in zip(keys, results)
        }

    def to_json(self) -> dict[str, str]:
        return {"amount": self._format_amount(), "currency": str(self.currency)}

    def __str__(self) -> str:
        return f"{self._format_amount()} {self.currency}"

    def _format_amount(self) -> str:
        return format(self.amount, f".{self.currency.exponent}f")

    def _check_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyError(
                f"Expected a money object with currency {self.currency} but got {other.currency}"
            )

    def _with_amount(self, amount: Decimal) -> "Money":
        return Money(amount=amount, currency=self.currency)
