from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from valuation.domain.account import Account, EntryValue
from valuation.domain.entry import Entry
from valuation.domain.errors import ClientError
from valuation.domain.money import EUR, CurrencyValue, Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryWithBalance:
    entry: Entry
    balance_after: Money


def _check_entries(entries: Sequence[EntryValue]) -> None:
    if not isinstance(entries, (list, tuple)):
        raise ClientError("Entries must be an array")


def compute_valuation(
    entries: Sequence[EntryValue],
    *,
    default_currency: CurrencyValue = EUR,
) -> Account:
    """
    Feed the entries, in order, to a fresh Account.
    Stops at the first failing entry (the error propagates).
    """
    _check_entries(entries)

    account = Account(currency=default_currency)
    for value in entries:
        account.add_entry(value)

    logger.debug(
        "Valued %d entries: %d assets, balance %s",
        len(entries), len(account.assets), account.get_balance(),
    )
    return account


def compute_running_valuation(
    entries: Sequence[EntryValue],
    *,
    default_currency: CurrencyValue = EUR,
) -> list[EntryWithBalance]:
    """
    Same as compute_valuation, but returns the assets total value after each
    entry (in the account currency at that point).
    """
    _check_entries(entries)

    account = Account(currency=default_currency)
    out: list[EntryWithBalance] = []
    for value in entries:
        entry = account.add_entry(value)
        out.append(EntryWithBalance(entry=entry, balance_after=account.get_balance()))

    return out
