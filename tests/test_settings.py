"""Tests for settings configuration loading."""

from __future__ import annotations

import json
from textwrap import dedent

import pytest
from pydantic import ValidationError

from strato_portfolio.settings import CONFIG_ENV_VAR, PortfolioSettings


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep local and user config files out of the picture."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    for name in (
        "STRATO_PORTFOLIO_MARKETPLACE_URL",
        "STRATO_PORTFOLIO_OWNER_COMMON_NAME",
        "STRATO_PORTFOLIO_CLIENT_ID",
        "STRATO_PORTFOLIO_CLIENT_SECRET",
        "STRATO_PORTFOLIO_USERNAME",
        "STRATO_PORTFOLIO_PASSWORD",
        "STRATO_PORTFOLIO_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path, body: str):
    config_path = tmp_path / "config.toml"
    config_path.write_text(dedent(body).strip())
    return config_path


def test_defaults():
    settings = PortfolioSettings()

    assert settings.asset_table == "BlockApps-Mercata-Asset"
    assert settings.oracle_table == "BlockApps-Mercata-PriceOracle-PriceUpdated"
    assert settings.native_token_symbol == "STRAT"
    assert settings.oracle_enabled is True
    assert settings.token_lifetime_reserve_seconds == 120
    assert settings.uses_password_grant is False


def test_loads_table_from_config_file(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        [strato_portfolio]
        marketplace_url = "node.example"
        owner_common_name = "alice"
        client_id = "portfolio-cli"
        request_timeout = 12.5
        oracle_enabled = false
        """,
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    settings = PortfolioSettings()

    assert settings.marketplace_url == "node.example"
    assert settings.owner_common_name == "alice"
    assert settings.client_id == "portfolio-cli"
    assert settings.request_timeout == 12.5
    assert settings.oracle_enabled is False


def test_loads_top_level_keys_from_local_file(tmp_path):
    (tmp_path / "strato-portfolio.toml").write_text('owner_common_name = "bob"\n')

    assert PortfolioSettings().owner_common_name == "bob"


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    config_path = _write_config(
        tmp_path,
        """
        owner_common_name = "from-file"
        marketplace_url = "file.example"
        client_id = "file-client"
        """,
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    monkeypatch.setenv("STRATO_PORTFOLIO_OWNER_COMMON_NAME", "from-env")
    monkeypatch.setenv("STRATO_PORTFOLIO_MARKETPLACE_URL", "env.example")

    settings = PortfolioSettings(owner_common_name="from-cli")

    assert settings.owner_common_name == "from-cli"
    assert settings.marketplace_url == "env.example"
    assert settings.client_id == "file-client"


@pytest.mark.parametrize("secret", ["client_secret", "password"])
def test_rejects_secrets_in_config_file(tmp_path, monkeypatch, secret):
    config_path = _write_config(tmp_path, f'{secret} = "hunter2"')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    with pytest.raises(ValueError, match="Security violation"):
        PortfolioSettings()


def test_secrets_from_env_are_redacted(monkeypatch):
    monkeypatch.setenv("STRATO_PORTFOLIO_CLIENT_SECRET", "hunter2")

    settings = PortfolioSettings()
    safe = settings.as_safe_dict()

    assert settings.client_secret is not None
    assert settings.client_secret.get_secret_value() == "hunter2"
    assert safe["client_secret"] == "***redacted***"
    assert "hunter2" not in json.dumps(safe, default=str)


def test_username_requires_password():
    with pytest.raises(ValidationError, match="configured together"):
        PortfolioSettings(username="alice@example.com")


def test_password_grant_enabled_with_both_credentials():
    settings = PortfolioSettings(username="alice@example.com", password="pw")

    assert settings.uses_password_grant is True
    assert settings.as_safe_dict()["password"] == "***redacted***"


@pytest.mark.parametrize(
    ("marketplace_url", "expected"),
    [
        ("node.example", "https://node.example/cirrus/search"),
        ("node.example/", "https://node.example/cirrus/search"),
        ("http://localhost:8080", "http://localhost:8080/cirrus/search"),
    ],
)
def test_cirrus_url(marketplace_url, expected):
    assert PortfolioSettings(marketplace_url=marketplace_url).cirrus_url == expected


def test_required_accessors_raise_when_missing():
    settings = PortfolioSettings()

    with pytest.raises(ValueError, match="marketplace_url must be configured"):
        _ = settings.cirrus_url
    with pytest.raises(ValueError, match="owner_common_name must be configured"):
        _ = settings.owner_common_name_required
    with pytest.raises(ValueError, match="client_id must be configured"):
        _ = settings.client_id_required


def test_rejects_non_positive_request_timeout():
    with pytest.raises(ValidationError):
        PortfolioSettings(request_timeout=0)
