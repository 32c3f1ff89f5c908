import datetime as dt
from decimal import Decimal

import pytest

from valuation.domain.entry import (
    AssetEntry,
    CurrencyConversion,
    CurrencyConversionEntry,
    DepreciationEntry,
    EntryKind,
    as_entry,
    entry_currency,
    parse_entry,
)
from valuation.domain.errors import InvalidEntryError
from valuation.domain.money import EUR, FIM, Money


def eur(s: str) -> dict:
    return {"amount": s, "currency": "EUR"}


def test_parse_asset_entry():
    e = parse_entry(
        date="2018-04-08",
        document_id="2018/001",
        asset_id="2018/001",
        description="Gran cassa",
        debit=eur("1500.00"),
        balance=eur("1500.00"),
    )

    assert isinstance(e, AssetEntry)
    assert e.kind == EntryKind.ASSET
    assert e.date == dt.date(2018, 4, 8)
    assert e.debit == Money.of("1500", EUR)
    assert e.credit is None
    assert str(e) == "Entry{2018/001 Gran cassa}"


def test_parse_depreciation_entry():
    e = parse_entry(
        date=dt.date(2018, 12, 31),
        document_id="2018/002",
        description="Annual equipment depreciation 5%",
        credit=eur("75.00"),
        balance=eur("1425.00"),
    )

    assert isinstance(e, DepreciationEntry)
    assert e.kind == EntryKind.DEPRECIATION
    assert e.credit.amount == Decimal("75.00")


def test_parse_currency_conversion_entry():
    e = parse_entry(
        date="2002-01-01",
        document_id="2002/001",
        description="Convert FIM to EUR",
        currency_conversion={"rate": 0.1681879265, "from": "FIM", "to": "EUR"},
        balance=eur("105.12"),
    )

    assert isinstance(e, CurrencyConversionEntry)
    assert e.currency_conversion == CurrencyConversion(
        from_currency=FIM, to_currency=EUR, rate=Decimal("0.1681879265")
    )
    assert e.asset_id is None


def test_asset_id_takes_precedence_over_credit():
    e = parse_entry(
        date="2018-06-14", document_id="2018/001", asset_id="2016/042",
        description="Stolen piano", credit=eur("1400.00"),
    )
    assert isinstance(e, AssetEntry)


def test_balance_is_optional_except_for_conversions():
    e = parse_entry(date="2018-12-31", document_id="d", description="x", credit=eur("1.00"))
    assert e.balance is None

    with pytest.raises(InvalidEntryError, match="requires a balance"):
        parse_entry(
            date="2002-01-01", document_id="d", description="x",
            currency_conversion={"rate": 2, "from": "FIM", "to": "EUR"},
        )


def test_conversion_balance_must_be_in_target_currency():
    with pytest.raises(InvalidEntryError):
        parse_entry(
            date="2002-01-01", document_id="d", description="x",
            currency_conversion={"rate": 2, "from": "FIM", "to": "EUR"},
            balance={"amount": "1.00", "currency": "FIM"},
        )


def test_unknown_entry_shape():
    with pytest.raises(InvalidEntryError, match="Unknown entry"):
        parse_entry(date="2018-04-08", document_id="2018/001", description="Invalid")


@pytest.mark.parametrize(
    "extra",
    [
        {"asset_id": "a", "currency_conversion": {"rate": 2, "from": "FIM", "to": "EUR"}},
        {"credit": eur("1.00"), "debit": eur("1.00")},
        {"debit": eur("1.00"), "currency_conversion": {"rate": 2, "from": "FIM", "to": "EUR"}},
    ],
)
def test_ambiguous_entries_are_rejected(extra):
    with pytest.raises(InvalidEntryError):
        parse_entry(date="2018-04-08", document_id="d", description="x", balance=eur("1.00"), **extra)


def test_undefined_document_id():
    with pytest.raises(InvalidEntryError) as exc:
        parse_entry(date="2016-10-02", asset_id="2016/042", description="Piano", debit=eur("1400.00"))
    assert str(exc.value) == "Undefined document id on entry Entry{2016-10-02 Piano}"


def test_undefined_currency_on_debit():
    with pytest.raises(InvalidEntryError) as exc:
        parse_entry(
            date="2016-10-02", document_id="2016/042", asset_id="2016/042",
            description="Piano", debit={"amount": "1400.00"}, balance=eur("1400.00"),
        )
    assert str(exc.value) == "Invalid debit on Entry{2016/042 Piano}: CurrencyError: Undefined currency"


def test_undefined_currency_on_balance():
    with pytest.raises(InvalidEntryError) as exc:
        parse_entry(
            date="2016-10-02", document_id="2016/042", asset_id="2016/042",
            description="Piano", debit=eur("1400.00"), balance={"amount": "1400.00"},
        )
    assert str(exc.value) == "Invalid balance on Entry{2016/042 Piano}: CurrencyError: Undefined currency"


def test_malformed_amount():
    with pytest.raises(InvalidEntryError, match="Invalid credit"):
        parse_entry(date="2016-10-02", document_id="d", description="x", credit=eur("abc"))


def test_malformed_date():
    with pytest.raises(InvalidEntryError, match="Invalid date"):
        parse_entry(date="2016-13-45", document_id="d", asset_id="a", description="x", debit=eur("1"))


def test_missing_description():
    with pytest.raises(InvalidEntryError):
        parse_entry(date="2016-10-02", document_id="d", asset_id="a", debit=eur("1"))


def test_malformed_conversion():
    with pytest.raises(InvalidEntryError, match="Invalid currency conversion"):
        parse_entry(
            date="2002-01-01", document_id="d", description="x",
            currency_conversion={"from": "FIM", "to": "EUR"}, balance=eur("1.00"),
        )
    with pytest.raises(InvalidEntryError, match="Invalid currency conversion"):
        parse_entry(
            date="2002-01-01", document_id="d", description="x",
            currency_conversion={"rate": 0, "from": "FIM", "to": "EUR"}, balance=eur("1.00"),
        )


def test_with_balance_returns_a_copy():
    e = parse_entry(date="2018-04-08", document_id="d", asset_id="a", description="x", debit=eur("10"))
    stamped = e.with_balance(Money.of(10, EUR))

    assert stamped.balance == Money.of(10, EUR)
    assert e.balance is None


def test_entry_currency_prefers_balance():
    e = parse_entry(
        date="2018-04-08", document_id="d", asset_id="a", description="x",
        debit={"amount": "1", "currency": "FIM"}, balance=eur("1"),
    )
    assert entry_currency(e) == EUR


def test_entry_currency_undefined():
    e = parse_entry(date="2018-04-08", document_id="d", asset_id="a", description="x")
    with pytest.raises(InvalidEntryError):
        entry_currency(e)


def test_as_entry_from_mapping():
    e = as_entry({"date": "2018-04-08", "document_id": "d", "asset_id": "a", "description": "x", "debit": eur("1")})
    assert isinstance(e, AssetEntry)
    assert as_entry(e) is e


def test_as_entry_rejects_unknown_fields():
    with pytest.raises(InvalidEntryError, match="Unknown entry fields"):
        as_entry({"date": "2018-04-08", "documentId": "d", "description": "x"})


def test_as_entry_rejects_non_mapping():
    with pytest.raises(InvalidEntryError):
        as_entry(["not", "an", "entry"])
