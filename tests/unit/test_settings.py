"""Tests for environment-driven settings."""

import pytest

from branchstock.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
        settings = Settings()

        assert settings.ledger.max_transaction_attempts == 5
        assert settings.ledger.default_restock_alert == 5
        assert settings.api.actor_role_header == "X-Actor-Role"
        assert settings.storage.db_path == tmp_path / "data" / "branchstock.db"

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LEDGER_MAX_TRANSACTION_ATTEMPTS", "9")
        monkeypatch.setenv("LEDGER_DEFAULT_RESTOCK_ALERT", "0")

        settings = get_settings()

        assert settings.ledger.max_transaction_attempts == 9
        assert settings.ledger.default_restock_alert == 0
        assert get_settings() is settings

    def test_attempts_must_be_positive(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LEDGER_MAX_TRANSACTION_ATTEMPTS", "0")

        with pytest.raises(ValueError):
            Settings()
