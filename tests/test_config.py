"""Tests for BridgeConfig."""

from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from okx_bridge.core.config import BridgeConfig, load_config
from okx_bridge.models import TradeMode


def test_config_defaults(config: BridgeConfig) -> None:
    """Test that non-credential settings have sensible defaults."""
    assert config.okx_base_url == "https://www.okx.com"
    assert config.okx_simulated_trading is False
    assert config.trade_mode is TradeMode.CROSS
    assert config.instrument_cache_ttl == 600.0
    assert config.request_timeout == 10.0
    assert config.host == "0.0.0.0"
    assert config.port == 3000
    assert config.log_dir == Path("logs")


def test_credentials_are_secret(config: BridgeConfig) -> None:
    assert "test-api-secret" not in repr(config)
    assert config.okx_api_secret.get_secret_value() == "test-api-secret"


@pytest.mark.parametrize(
    "missing", ["tv_secret", "okx_api_key", "okx_api_secret", "okx_api_passphrase"]
)
def test_missing_credential_fails(monkeypatch: pytest.MonkeyPatch, missing: str) -> None:
    monkeypatch.delenv(missing.upper(), raising=False)
    values = {
        "tv_secret": "s",
        "okx_api_key": "k",
        "okx_api_secret": "x",
        "okx_api_passphrase": "p",
    }
    del values[missing]

    with pytest.raises(ValidationError, match=missing):
        BridgeConfig(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_secret_fails(config_factory: Callable[..., BridgeConfig], blank: str) -> None:
    with pytest.raises(ValidationError, match="tv_secret must not be empty"):
        config_factory(tv_secret=blank)


def test_base_url_trailing_slash_is_stripped(config_factory: Callable[..., BridgeConfig]) -> None:
    config = config_factory(okx_base_url="https://www.okx.com/")
    assert config.okx_base_url == "https://www.okx.com"


def test_base_url_must_be_http(config_factory: Callable[..., BridgeConfig]) -> None:
    with pytest.raises(ValidationError, match="http"):
        config_factory(okx_base_url="ftp://okx.com")


@pytest.mark.parametrize(
    "overrides",
    [{"instrument_cache_ttl": 0}, {"request_timeout": -1}, {"port": 0}, {"port": 70000}],
)
def test_out_of_range_settings_fail(
    config_factory: Callable[..., BridgeConfig], overrides: dict[str, object]
) -> None:
    with pytest.raises(ValidationError):
        config_factory(**overrides)


def test_load_config_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TV_SECRET", "from-env")
    monkeypatch.setenv("OKX_API_KEY", "key")
    monkeypatch.setenv("OKX_API_SECRET", "secret")
    monkeypatch.setenv("OKX_API_PASSPHRASE", "pass")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("OKX_SIMULATED_TRADING", "true")
    monkeypatch.setenv("TRADE_MODE", "isolated")

    config = load_config()

    assert config.tv_secret.get_secret_value() == "from-env"
    assert config.port == 8080
    assert config.okx_simulated_trading is True
    assert config.trade_mode is TradeMode.ISOLATED


def test_load_config_reads_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("TV_SECRET", "OKX_API_KEY", "OKX_API_SECRET", "OKX_API_PASSPHRASE"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / ".env").write_text(
        "TV_SECRET=dotenv-secret\nOKX_API_KEY=k\nOKX_API_SECRET=s\nOKX_API_PASSPHRASE=p\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.tv_secret.get_secret_value() == "dotenv-secret"
