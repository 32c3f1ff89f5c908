from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional, Union

from valuation.domain.errors import InvalidEntryError
from valuation.domain.money import Currency, Money, parse_decimal


class EntryKind(str, Enum):
    ASSET = "ASSET"
    DEPRECIATION = "DEPRECIATION"
    CURRENCY_CONVERSION = "CURRENCY_CONVERSION"


@dataclass(frozen=True)
class CurrencyConversion:
    from_currency: Currency
    to_currency: Currency
    rate: Decimal

    @classmethod
    def from_value(cls, value: "CurrencyConversion | Mapping[str, Any]") -> "CurrencyConversion":
        """From the wire shape {"from": "FIM", "to": "EUR", "rate": 0.1681879265}."""
        if isinstance(value, CurrencyConversion):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Expected a currency conversion, got {type(value).__name__}")
        if value.get("rate") is None:
            raise ValueError("Undefined rate")

        return cls(
            from_currency=Currency.of(value.get("from")),
            to_currency=Currency.of(value.get("to")),
            rate=parse_decimal(value["rate"]),
        )

    def __post_init__(self) -> None:
        if not isinstance(self.from_currency, Currency) or not isinstance(self.to_currency, Currency):
            raise ValueError("conversion currencies must be Currency")
        if not isinstance(self.rate, Decimal):
            raise ValueError("conversion rate must be a Decimal")
        if self.rate <= 0:
            raise ValueError("conversion rate must be > 0")


@dataclass(frozen=True)
class _BaseEntry:
    date: dt.date
    document_id: str
    description: str

    def __post_init__(self) -> None:
        if not isinstance(self.date, dt.date):
            raise InvalidEntryError("entry.date must be a date")
        if not isinstance(self.document_id, str) or not self.document_id.strip():
            raise InvalidEntryError("entry.document_id must be non-empty")
        if not isinstance(self.description, str):
            raise InvalidEntryError("entry.description must be a string")
        for name in ("debit", "credit", "balance"):
            value = getattr(self, name, None)
            if value is not None and not isinstance(value, Money):
                raise InvalidEntryError(f"entry.{name} must be a Money")

    def with_balance(self, balance: Money):
        return replace(self, balance=balance)

    def __str__(self) -> str:
        return _label(self.document_id, self.date, self.description)


@dataclass(frozen=True)
class AssetEntry(_BaseEntry):
    """Entry booked on one asset: acquisition, disposal, impairment..."""
    asset_id: str
    debit: Optional[Money] = None
    credit: Optional[Money] = None
    balance: Optional[Money] = None

    kind: ClassVar[EntryKind] = EntryKind.ASSET

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.asset_id, str) or not self.asset_id.strip():
            raise InvalidEntryError("entry.asset_id must be non-empty")


@dataclass(frozen=True)
class DepreciationEntry(_BaseEntry):
    """Credit spread over all assets by their current value."""
    credit: Money
    balance: Optional[Money] = None

    kind: ClassVar[EntryKind] = EntryKind.DEPRECIATION

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.credit is None:
            raise InvalidEntryError("depreciation entry must have a credit")


@dataclass(frozen=True)
class CurrencyConversionEntry(_BaseEntry):
    """
    Converts every asset to another currency.
    balance is the declared total after the conversion (per asset once swept).
    """
    currency_conversion: CurrencyConversion
    balance: Money
    asset_id: Optional[str] = None

    kind: ClassVar[EntryKind] = EntryKind.CURRENCY_CONVERSION

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.currency_conversion, CurrencyConversion):
            raise InvalidEntryError("entry.currency_conversion must be a CurrencyConversion")
        if self.balance is None:
            raise InvalidEntryError("currency conversion entry must have a balance")
        if self.balance.currency != self.currency_conversion.to_currency:
            raise InvalidEntryError(
                f"Expected balance in {self.currency_conversion.to_currency} "
                f"but was in {self.balance.currency} on {self}"
            )


Entry = Union[AssetEntry, DepreciationEntry, CurrencyConversionEntry]
ENTRY_TYPES = (AssetEntry, DepreciationEntry, CurrencyConversionEntry)

ENTRY_FIELDS = frozenset(
    {"date", "document_id", "description", "asset_id", "debit", "credit", "balance", "currency_conversion"}
)


def _label(document_id: Any, date: Any, description: Any) -> str:
    return f"Entry{{{document_id or date} {description}}}"


def _parse_date(value: Any, label: str) -> dt.date:
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidEntryError(f"Invalid date on {label}: {exc}") from exc
    raise InvalidEntryError(f"Undefined date on entry {label}")


def _parse_money(field: str, value: Any, label: str) -> Money | None:
    if value is None:
        return None
    try:
        return Money.from_value(value)
    except (ValueError, TypeError, ArithmeticError) as err:
        raise InvalidEntryError(f"Invalid {field} on {label}: {type(err).__name__}: {err}") from err


def _parse_conversion(value: Any, label: str) -> CurrencyConversion | None:
    if value is None:
        return None
    try:
        return CurrencyConversion.from_value(value)
    except (ValueError, TypeError, ArithmeticError) as err:
        raise InvalidEntryError(
            f"Invalid currency conversion on {label}: {type(err).__name__}: {err}"
        ) from err


def parse_entry(
    *,
    date: Any = None,
    document_id: Optional[str] = None,
    description: Optional[str] = None,
    asset_id: Optional[str] = None,
    debit: Any = None,
    credit: Any = None,
    balance: Any = None,
    currency_conversion: Any = None,
) -> Entry:
    """
    Validate raw entry values once and return the matching entry kind:
    - asset_id set -> AssetEntry
    - no asset_id, credit set -> DepreciationEntry
    - no asset_id, currency_conversion set -> CurrencyConversionEntry
    Anything else (or a mix of them) raises InvalidEntryError.
    """
    label = _label(document_id, date, description)

    if not isinstance(document_id, str) or not document_id.strip():
        raise InvalidEntryError(f"Undefined document id on entry {label}")
    if description is None:
        raise InvalidEntryError(f"Undefined description on entry {label}")
    if not isinstance(description, str):
        raise InvalidEntryError(f"Invalid description on {label}")

    norm_date = _parse_date(date, label)
    norm_document_id = document_id.strip()

    norm_debit = _parse_money("debit", debit, label)
    norm_credit = _parse_money("credit", credit, label)
    norm_balance = _parse_money("balance", balance, label)
    conversion = _parse_conversion(currency_conversion, label)

    common = dict(date=norm_date, document_id=norm_document_id, description=description)

    if asset_id:
        if conversion is not None:
            raise InvalidEntryError(f"Ambiguous entry {label}: an asset entry cannot convert currency")
        return AssetEntry(
            **common,
            asset_id=asset_id.strip() if isinstance(asset_id, str) else asset_id,
            debit=norm_debit,
            credit=norm_credit,
            balance=norm_balance,
        )

    if norm_credit is not None:
        if norm_debit is not None or conversion is not None:
            raise InvalidEntryError(f"Ambiguous entry {label}: a depreciation entry can only have a credit")
        return DepreciationEntry(**common, credit=norm_credit, balance=norm_balance)

    if conversion is not None:
        if norm_debit is not None:
            raise InvalidEntryError(f"Ambiguous entry {label}: a currency conversion cannot have a debit")
        if norm_balance is None:
            raise InvalidEntryError(f"Invalid balance on {label}: a currency conversion requires a balance")
        return CurrencyConversionEntry(**common, currency_conversion=conversion, balance=norm_balance)

    raise InvalidEntryError(f"Unknown entry: {label}")


def entry_currency(entry: Entry) -> Currency:
    """Currency an entry is expressed in: balance first, then credit, then debit."""
    for name in ("balance", "credit", "debit"):
        money = getattr(entry, name, None)
        if money is not None:
            return money.currency
    raise InvalidEntryError(f"Undefined currency on entry {entry}")


def as_entry(value: "Entry | Mapping[str, Any]") -> Entry:
    if isinstance(value, ENTRY_TYPES):
        return value
    if not isinstance(value, Mapping):
        raise InvalidEntryError(f"Invalid entry: expected an object, got {type(value).__name__}")

    unknown = set(value) - ENTRY_FIELDS
    if unknown:
        raise InvalidEntryError(f"Unknown entry fields: {', '.join(sorted(map(str, unknown)))}")
    return parse_entry(**value)
