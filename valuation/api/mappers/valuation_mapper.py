from __future__ import annotations

from typing import Any

from valuation.api.schemas.valuation import (
    AssetResponse,
    CurrencyConversionResponse,
    EntryResponse,
    EntryValue,
    MoneyResponse,
    ValuationResponse,
)
from valuation.domain.account import Account
from valuation.domain.asset import Asset, AssetEntryValue
from valuation.domain.money import Money


def entry_value_to_kwargs(payload: EntryValue) -> dict[str, Any]:
    """Request entry -> keyword arguments of parse_entry (parsed by the Account)."""
    return {
        "date": payload.date,
        "document_id": payload.document_id,
        "description": payload.description,
        "asset_id": payload.asset_id,
        "debit": payload.debit.model_dump() if payload.debit else None,
        "credit": payload.credit.model_dump() if payload.credit else None,
        "balance": payload.balance.model_dump() if payload.balance else None,
        "currency_conversion": (
            payload.currency_conversion.model_dump(by_alias=True) if payload.currency_conversion else None
        ),
    }


def money_to_response(money: Money | None) -> MoneyResponse | None:
    if money is None:
        return None
    return MoneyResponse(**money.to_json())


def entry_to_response(entry: AssetEntryValue) -> EntryResponse:
    conversion = getattr(entry, "currency_conversion", None)
    return EntryResponse(
        date=entry.date,
        document_id=entry.document_id,
        asset_id=entry.asset_id,
        description=entry.description,
        debit=money_to_response(getattr(entry, "debit", None)),
        credit=money_to_response(getattr(entry, "credit", None)),
        balance=money_to_response(entry.balance),
        currency_conversion=(
            CurrencyConversionResponse(
                from_currency=str(conversion.from_currency),
                to_currency=str(conversion.to_currency),
                rate=float(conversion.rate),
            )
            if conversion is not None
            else None
        ),
    )


def asset_to_response(asset: Asset) -> AssetResponse:
    return AssetResponse(
        id=asset.id,
        name=asset.name,
        debit=money_to_response(asset.debit),
        credit=money_to_response(asset.credit),
        balance=money_to_response(asset.balance),
        entries=[entry_to_response(e) for e in asset.entries],
    )


def account_to_response(account: Account) -> ValuationResponse:
    return ValuationResponse(
        balance=money_to_response(account.get_balance()),
        assets=[asset_to_response(a) for a in account.assets],
    )
