"""
Tests for environment-driven configuration
"""

from banking_services.config import BankingConfig, get_config, reload_config


class TestBankingConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BANKING_STORAGE_TYPE", raising=False)
        config = BankingConfig(_env_file=None)

        assert config.storage_type == "memory"
        assert config.api_port == 8080
        assert config.client_api_url == ""
        assert config.statement_concurrency == 8

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("BANKING_STORAGE_TYPE", "sqlite")
        monkeypatch.setenv("BANKING_CLIENT_API_URL", "http://clients:8080")
        monkeypatch.setenv("BANKING_STATEMENT_CONCURRENCY", "2")

        config = BankingConfig(_env_file=None)

        assert config.storage_type == "sqlite"
        assert config.client_api_url == "http://clients:8080"
        assert config.statement_concurrency == 2

    def test_reload(self, monkeypatch):
        monkeypatch.setenv("BANKING_API_PORT", "9090")

        try:
            assert reload_config().api_port == 9090
            assert get_config().api_port == 9090
        finally:
            monkeypatch.delenv("BANKING_API_PORT")
            reload_config()
