import pytest

from valuation.settings import get_settings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("VALUATION_DEFAULT_CURRENCY", raising=False)
    monkeypatch.delenv("VALUATION_LOG_LEVEL", raising=False)

    settings = get_settings()

    assert settings.default_currency == "EUR"
    assert settings.log_level == "INFO"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("VALUATION_DEFAULT_CURRENCY", " USD ")
    monkeypatch.setenv("VALUATION_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.default_currency == "USD"
    assert settings.log_level == "DEBUG"


def test_settings_rejects_unknown_log_level(monkeypatch):
    monkeypatch.setenv("VALUATION_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        get_settings()
