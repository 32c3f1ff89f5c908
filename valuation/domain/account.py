from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Union

from valuation.domain.asset import Asset, AssetType
from valuation.domain.entry import (
    AssetEntry,
    CurrencyConversionEntry,
    DepreciationEntry,
    Entry,
    as_entry,
    entry_currency,
)
from valuation.domain.errors import BalanceError, InvalidEntryError
from valuation.domain.money import EUR, Currency, CurrencyValue, Money

logger = logging.getLogger(__name__)

EntryValue = Union[Entry, Mapping[str, Any]]


class Account:
    """
    Ledger account made of assets.

    The first entry fixes the currency and the account type (a debit opens an
    asset account, a credit a liability account). After every entry the total
    of the assets must equal the balance the entry declares.
    """

    def __init__(self, currency: CurrencyValue = EUR) -> None:
        # Replaced by the first entry and by currency conversions
        self._currency = Currency.of(currency)
        self._type = AssetType.ASSET
        self._assets: dict[str, Asset] = {}

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def type(self) -> AssetType:
        return self._type

    @property
    def assets(self) -> list[Asset]:
        return list(self._assets.values())

    @property
    def balance(self) -> Money:
        return self.get_balance()

    def is_empty(self) -> bool:
        return not self._assets

    def contains_asset(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def get_asset(self, asset_id: str) -> Asset | None:
        return self._assets.get(asset_id)

    def get_balance(self) -> Money:
        total = Money.zero(self._currency)
        for asset in self._assets.values():
            total = total + asset.balance
        return total

    def add_entry(self, value: EntryValue) -> Entry:
        """
        Apply one entry, all or nothing.

        Raises InvalidEntryError for a malformed entry and BalanceError when the
        declared balance does not match; the account is then left as it was,
        including the Asset objects already handed out by `assets`.
        """
        entry = as_entry(value)

        snapshot = self._snapshot()
        try:
            self._apply(entry)
            self._check_total_value_equals(entry)
        except Exception:
            self._restore(snapshot)
            raise

        return entry

    def _snapshot(self) -> tuple[Currency, AssetType, list[tuple[Asset, Asset]]]:
        return self._currency, self._type, [(a, a.copy()) for a in self._assets.values()]

    def _restore(self, snapshot: tuple[Currency, AssetType, list[tuple[Asset, Asset]]]) -> None:
        self._currency, self._type, saved = snapshot
        for asset, saved_copy in saved:
            asset.restore(saved_copy)
        # Assets created by the failed entry are dropped
        self._assets = {asset.id: asset for asset, _ in saved}

    def _apply(self, entry: Entry) -> None:
        if self.is_empty():
            self._currency = entry_currency(entry)
            self._type = _account_type(entry)

        if isinstance(entry, AssetEntry):
            self._apply_asset_entry(entry)
        elif isinstance(entry, DepreciationEntry):
            self._apply_depreciation(entry)
        elif isinstance(entry, CurrencyConversionEntry):
            self._apply_currency_conversion(entry)
        else:
            raise InvalidEntryError(f"Unknown entry: {entry}")

    def _apply_asset_entry(self, entry: AssetEntry) -> None:
        if not self.contains_asset(entry.asset_id):
            asset = Asset(entry.asset_id, entry.description, self._currency, self._type)
            self._assets[asset.id] = asset

        self._assets[entry.asset_id].add_entry(entry)

    def _apply_depreciation(self, entry: DepreciationEntry) -> None:
        ratios = self._ratios_per_asset_value()

        if not ratios:
            logger.debug("No assets left to depreciate on %s", entry)
            return

        depreciations = entry.credit.allocate(ratios)
        logger.debug("Depreciating %s over %d assets on %s", entry.credit, len(depreciations), entry)

        for asset_id, amount in depreciations.items():
            asset = self._require_asset(asset_id)
            asset.add_entry(
                AssetEntry(
                    date=entry.date,
                    document_id=entry.document_id,
                    description=entry.description,
                    asset_id=asset_id,
                    credit=amount,
                    balance=asset.balance - amount,
                )
            )

    def _apply_currency_conversion(self, entry: CurrencyConversionEntry) -> None:
        conversion = entry.currency_conversion
        ratios = self._ratios_per_asset_value()

        self._currency = conversion.to_currency

        # Assets without a positive balance get no share, only re-denominated (zero stays zero)
        converted = {
            asset.id: asset.balance.convert_to(conversion.to_currency, conversion.rate)
            for asset in self._assets.values()
            if not asset.balance.is_positive()
        }

        # The rest of the declared total is allocated so that no cent is lost in the conversion
        if ratios:
            remaining = entry.balance
            for balance in converted.values():
                remaining = remaining - balance
            converted.update(remaining.allocate(ratios))

        logger.debug(
            "Converting %d assets from %s to %s on %s",
            len(self._assets), conversion.from_currency, conversion.to_currency, entry,
        )

        for asset in self._assets.values():
            converted_balance = converted[asset.id]
            asset.add_entry(
                CurrencyConversionEntry(
                    date=entry.date,
                    document_id=entry.document_id,
                    description=entry.description,
                    currency_conversion=conversion,
                    balance=converted_balance,
                    asset_id=asset.id,
                )
            )

    def _ratios_per_asset_value(self) -> list[tuple[str, Decimal]]:
        return [
            (asset.id, asset.balance.amount)
            for asset in self._assets.values()
            if asset.balance.is_positive()
        ]

    def _require_asset(self, asset_id: str) -> Asset:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise KeyError(f"Asset {asset_id!r} was not found")
        return asset

    def _check_total_value_equals(self, entry: Entry) -> None:
        """
        Postcondition: after an entry, the assets total value equals the
        balance declared on the entry (when it declares one).
        """
        if entry.balance is None:
            return

        total = self.get_balance()

        if total != entry.balance:
            raise BalanceError(
                f"Expected assets total value to equal {entry} balance {entry.balance} but was {total}",
                expected=entry.balance,
                actual=total,
            )

    def __repr__(self) -> str:
        return f"Account(currency={self._currency}, type={self._type.value}, assets={len(self._assets)})"


def _account_type(first_entry: Entry) -> AssetType:
    debit = getattr(first_entry, "debit", None)
    credit = getattr(first_entry, "credit", None)

    if debit is not None and credit is None:
        return AssetType.ASSET
    if debit is None and credit is not None:
        return AssetType.LIABILITY

    raise InvalidEntryError("First entry must be either a debit or a credit entry")
