"""CLI tests for the strato-portfolio entrypoint."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from strato_portfolio.main import app
from strato_portfolio.pipeline import run as pipeline_run
from strato_portfolio.processors import AssetGroup, valuate
from strato_portfolio.settings import CONFIG_ENV_VAR

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    # registered so the CLI's own write to this variable is undone afterwards
    monkeypatch.setenv(CONFIG_ENV_VAR, "")
    monkeypatch.delenv(CONFIG_ENV_VAR)
    monkeypatch.setenv("STRATO_PORTFOLIO_CLIENT_ID", "portfolio-cli")
    monkeypatch.setenv("STRATO_PORTFOLIO_MARKETPLACE_URL", "node.example")
    monkeypatch.delenv("STRATO_PORTFOLIO_OWNER_COMMON_NAME", raising=False)
    monkeypatch.delenv("STRATO_PORTFOLIO_CLIENT_SECRET", raising=False)


@pytest.fixture
def fake_run(monkeypatch):
    calls: list[tuple] = []

    async def _fake_run_portfolio(state, owner, client=None):
        calls.append((state.settings, owner))
        groups = [AssetGroup(name="GOLDST", decimals=3, total_quantity=2500)]
        return valuate(groups, {"GOLDST": "2000"})

    monkeypatch.setattr(pipeline_run, "run_portfolio", _fake_run_portfolio)
    return calls


def test_show_config_redacts_secrets(monkeypatch):
    monkeypatch.setenv("STRATO_PORTFOLIO_CLIENT_SECRET", "hunter2")

    result = runner.invoke(app, ["alice", "--show-config", "--log-level", "warning"])

    assert result.exit_code == 0
    config = json.loads(result.stdout)
    assert config["owner_common_name"] == "alice"
    assert config["client_secret"] == "***redacted***"
    assert "hunter2" not in result.output


def test_config_option_points_at_toml(tmp_path):
    config_path = tmp_path / "portfolio.toml"
    config_path.write_text('[strato_portfolio]\nowner_common_name = "carol"\n')

    result = runner.invoke(
        app, ["--config", str(config_path), "--show-config", "--log-level", "warning"]
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["owner_common_name"] == "carol"


def test_missing_owner_is_a_usage_error(fake_run):
    result = runner.invoke(app, ["--log-level", "warning"])

    assert result.exit_code == 2
    assert "owner_common_name" in result.output
    assert fake_run == []


def test_missing_client_id_is_a_usage_error(monkeypatch, fake_run):
    monkeypatch.delenv("STRATO_PORTFOLIO_CLIENT_ID")

    result = runner.invoke(app, ["alice", "--log-level", "warning"])

    assert result.exit_code == 2
    assert "client_id" in result.output
    assert fake_run == []


def test_json_output(fake_run):
    result = runner.invoke(
        app, ["alice", "--json", "--no-oracle", "--log-level", "warning"]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["owner"] == "alice"
    assert data["assets"][0]["usd_value"] == "5000.00"
    assert Decimal(data["summary"]["fungible_value_usd"]) == Decimal("5000")

    settings, owner = fake_run[0]
    assert owner == "alice"
    assert settings.oracle_enabled is False


def test_table_output(fake_run):
    result = runner.invoke(app, ["alice", "--log-level", "warning"])

    assert result.exit_code == 0, result.output
    assert "STRATO Portfolio" in result.stdout
    assert "GOLDST" in result.stdout


@pytest.mark.parametrize(
    "args",
    [
        ["alice", "--json", "--log-level", "warning"],
        ["--json", "alice", "--log-level", "warning"],
        ["--json", "--log-level", "warning", "alice"],
    ],
)
def test_options_accepted_around_owner(fake_run, args):
    result = runner.invoke(app, args)

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["owner"] == "alice"
    assert fake_run[0][1] == "alice"
