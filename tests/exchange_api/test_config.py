"""
Configuration Tests.

============================================================
PURPOSE
============================================================
Tests for ExchangeAPIConfig construction.

============================================================
"""

import logging

import pytest

from exchange_api import ExchangeAPIConfig, MarketPair, RetryPolicy, configure_logging


ENV_VARS = (
    "EXCHANGE_NAME",
    "MARKET_ASSET_A",
    "MARKET_ASSET_B",
    "RETRY_MAX_RETRIES",
    "KEY_VAULT_ENDPOINT",
    "GATEWAY_ENDPOINT",
    "ACCESS_TOKEN",
    "KEY_ID",
    "CLONE_ID",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        # setenv first so teardown also removes values loaded by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestExchangeAPIConfig:
    """Tests for ExchangeAPIConfig."""

    def test_defaults(self):
        """Test default configuration."""
        config = ExchangeAPIConfig()

        assert config.exchange_name == "mock"
        assert config.market is None
        assert config.retry == RetryPolicy()
        assert not config.key_vault.is_configured

    def test_from_env(self, clean_env):
        """Test configuration from environment variables."""
        clean_env.setenv("EXCHANGE_NAME", "poloniex")
        clean_env.setenv("MARKET_ASSET_A", "ETH")
        clean_env.setenv("MARKET_ASSET_B", "BTC")
        clean_env.setenv("RETRY_MAX_RETRIES", "5")
        clean_env.setenv("GATEWAY_ENDPOINT", "https://gateway.test/graphql")
        clean_env.setenv("ACCESS_TOKEN", "secret-token")
        clean_env.setenv("KEY_ID", "key-1")
        clean_env.setenv("CLONE_ID", "clone-1")

        config = ExchangeAPIConfig.from_env()

        assert config.exchange_name == "poloniex"
        assert config.market == MarketPair("ETH", "BTC")
        assert config.retry.max_retries == 5
        assert config.retry.factor == 1.5
        assert config.key_vault.endpoint == "https://gateway.test/graphql"
        assert config.key_vault.is_configured
        assert config.key_vault.key_id == "key-1"
        assert config.key_vault.clone_id == "clone-1"

    def test_from_env_file(self, clean_env, tmp_path):
        """Test values are read from a .env file."""
        env_file = tmp_path / "exchange.env"
        env_file.write_text("MARKET_ASSET_A=BTC\nMARKET_ASSET_B=USDT\nLOG_LEVEL=DEBUG\n")

        config = ExchangeAPIConfig.from_env(str(env_file))

        assert config.market == MarketPair("BTC", "USDT")
        assert config.log_level == "DEBUG"

    def test_from_env_partial_market(self, clean_env):
        """Test a half-configured market is ignored."""
        clean_env.setenv("MARKET_ASSET_A", "BTC")

        assert ExchangeAPIConfig.from_env().market is None

    def test_effective_retry(self):
        """Test disabling retries collapses the policy."""
        config = ExchangeAPIConfig(retry=RetryPolicy(max_retries=4))

        assert config.effective_retry.max_retries == 4
        config.retry_enabled = False
        assert config.effective_retry.max_retries == 0

    def test_for_testing(self):
        """Test the testing configuration."""
        config = ExchangeAPIConfig.for_testing()

        assert config.market == MarketPair("BTC", "USDT")
        assert config.retry.min_delay_seconds == 0.0
        assert config.retry.max_retries == 2


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_accepts_level_names(self):
        """Test level names and unknown names are accepted."""
        configure_logging("debug")
        configure_logging("not-a-level")
        configure_logging(logging.WARNING)
