import pytest
from pydantic import ValidationError

from bisect_memo.config import MemoSettings
from bisect_memo.task import MemoizedTask


def test_memo_settings_env(monkeypatch):
    monkeypatch.setenv("BISECT_MEMO_EXPIRY_MS", "250")
    monkeypatch.setenv("BISECT_MEMO_LOG_LEVEL", "DEBUG")

    settings = MemoSettings()
    assert settings.expiry_ms == 250
    assert settings.log_level == "DEBUG"


def test_memo_settings_defaults(monkeypatch):
    monkeypatch.delenv("BISECT_MEMO_EXPIRY_MS", raising=False)
    monkeypatch.delenv("BISECT_MEMO_LOG_LEVEL", raising=False)

    settings = MemoSettings()
    assert settings.expiry_ms is None
    assert settings.log_level == "INFO"


def test_memo_settings_rejects_non_positive_expiry():
    with pytest.raises(ValidationError):
        MemoSettings(expiry_ms=0)


def test_settings_supply_default_expiry():
    settings = MemoSettings(expiry_ms=500)

    task = MemoizedTask(lambda: 1, lambda v: v, settings=settings)
    assert task.expiry == 500
    assert task.ttl == 0.5


def test_explicit_expiry_overrides_settings():
    settings = MemoSettings(expiry_ms=500)

    task = MemoizedTask(lambda: 1, lambda v: v, expiry=100, settings=settings)
    assert task.expiry == 100
