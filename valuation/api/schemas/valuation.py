from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # documentId <-> document_id
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurrencyDefinition(BaseModel):
    code: str = Field(..., min_length=1)
    exponent: int = Field(default=2, ge=0)


class MoneyValue(BaseModel):
    # Both optional here: a missing one is reported as an invalid entry
    amount: str | int | float | None = Field(default=None, examples=["1500.00"])
    currency: str | CurrencyDefinition | None = Field(default=None, examples=["EUR"])


class CurrencyConversionValue(CamelModel):
    from_currency: str | CurrencyDefinition = Field(..., alias="from")
    to_currency: str | CurrencyDefinition = Field(..., alias="to")
    rate: str | int | float = Field(..., examples=[0.1681879265])


class EntryValue(CamelModel):
    date: dt.date | None = None
    document_id: str | None = None
    asset_id: str | None = None
    description: str | None = None
    debit: MoneyValue | None = None
    credit: MoneyValue | None = None
    balance: MoneyValue | None = None
    currency_conversion: CurrencyConversionValue | None = None


class ValuationRequest(BaseModel):
    entries: list[EntryValue]


class MoneyResponse(BaseModel):
    amount: str
    currency: str


class CurrencyConversionResponse(CamelModel):
    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    rate: float


class EntryResponse(CamelModel):
    date: dt.date
    document_id: str
    asset_id: str | None = None
    description: str
    debit: MoneyResponse | None = None
    credit: MoneyResponse | None = None
    balance: MoneyResponse | None = None
    currency_conversion: CurrencyConversionResponse | None = None


class AssetResponse(BaseModel):
    id: str
    name: str
    debit: MoneyResponse
    credit: MoneyResponse
    balance: MoneyResponse
    entries: list[EntryResponse]


class ValuationResponse(BaseModel):
    balance: MoneyResponse
    assets: list[AssetResponse]


class ErrorResponse(BaseModel):
    message: str
