from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from valuation.domain.money import Money


class ClientError(Exception):
    """
    The request itself is wrong (bad entries, wrong declared balance).
    Answered with HTTP 400; anything else is a server error.
    """


class InvalidEntryError(ClientError):
    pass


class BalanceError(ClientError):
    """Declared balance of an entry differs from the recomputed total."""

    def __init__(self, message: str, *, expected: "Money", actual: "Money") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual
