from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    default_currency: str
    log_level: str


def get_settings() -> Settings:
    # Currency of an account with no entries yet
    currency = os.getenv("VALUATION_DEFAULT_CURRENCY", "").strip() or "EUR"

    level = os.getenv("VALUATION_LOG_LEVEL", "").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Invalid VALUATION_LOG_LEVEL: {level!r}")

    return Settings(default_currency=currency, log_level=level)
