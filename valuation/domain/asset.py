from __future__ import annotations

from copy import copy as _shallow_copy
from enum import Enum
from typing import Union

from valuation.domain.entry import AssetEntry, CurrencyConversionEntry
from valuation.domain.money import Currency, CurrencyError, CurrencyValue, Money


# Balance sign of a sub-ledger: assets grow with debits, liabilities with credits
class AssetType(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"


AssetEntryValue = Union[AssetEntry, CurrencyConversionEntry]


class Asset:
    """
    Sub-ledger of a single asset.

    Keeps the cumulative debit and credit in one currency and the entries that
    were applied, each one stamped with the asset balance right after it.
    Only Account mutates it.
    """

    def __init__(
        self,
        id: str,
        name: str,
        currency: CurrencyValue,
        type: AssetType | str = AssetType.ASSET,
    ) -> None:
        try:
            self.type = AssetType(type)
        except ValueError:
            raise ValueError(f"Invalid type '{type}'") from None

        if not isinstance(id, str) or not id.strip():
            raise ValueError("Asset id cannot be empty")

        zero = Money.zero(currency)

        self.id = id
        self.name = name
        self._debit = zero
        self._credit = zero
        self._entries: list[AssetEntryValue] = []

    @property
    def debit(self) -> Money:
        return self._debit

    @property
    def credit(self) -> Money:
        return self._credit

    @property
    def balance(self) -> Money:
        if self.type is AssetType.LIABILITY:
            return self._credit - self._debit
        return self._debit - self._credit

    @property
    def currency(self) -> Currency:
        return self._debit.currency

    @property
    def entries(self) -> tuple[AssetEntryValue, ...]:
        return tuple(self._entries)

    def add_entry(self, entry: AssetEntryValue) -> None:
        if isinstance(entry, CurrencyConversionEntry):
            self._convert_currency(entry)
        elif isinstance(entry, AssetEntry):
            debit = self._debit if entry.debit is None else self._debit + entry.debit
            credit = self._credit if entry.credit is None else self._credit + entry.credit
            self._debit, self._credit = debit, credit
        else:
            raise TypeError(f"Cannot add {type(entry).__name__} to an asset")

        self._entries.append(entry.with_balance(self.balance))

    def copy(self) -> "Asset":
        clone = _shallow_copy(self)
        clone._entries = list(self._entries)
        return clone

    def restore(self, saved: "Asset") -> None:
        """Put back the ledger state of a copy() taken from this asset."""
        if saved.id != self.id:
            raise ValueError(f"Cannot restore {self} from {saved}")
        self._debit, self._credit = saved._debit, saved._credit
        self._entries = list(saved._entries)

    def _balance_sign(self) -> int:
        return -1 if self.type is AssetType.LIABILITY else 1

    def _convert_currency(self, entry: CurrencyConversionEntry) -> None:
        conversion = entry.currency_conversion
        if self.currency != conversion.from_currency:
            raise CurrencyError(
                f"Expected conversion from {self.currency} but was from {conversion.from_currency}"
            )

        # debit is back-solved: balance == entry.balance, whatever the credit rounded to
        credit = self._credit.convert_to(conversion.to_currency, conversion.rate)
        self._debit = entry.balance * self._balance_sign() + credit
        self._credit = credit

    def __str__(self) -> str:
        return f"Asset{{{self.id} {self.name} {self.balance}}}"

    def __repr__(self) -> str:
        return f"Asset(id={self.id!r}, name={self.name!r}, type={self.type.value!r}, balance={self.balance})"
