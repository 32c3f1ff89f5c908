from __future__ import annotations

from functools import lru_cache

from valuation.domain.money import Currency
from valuation.settings import get_settings


@lru_cache
def get_default_currency() -> Currency:
    settings = get_settings()
    return Currency.of(settings.default_currency)
