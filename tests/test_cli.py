"""Tests for the registry command line interface."""

import pytest
from typer.testing import CliRunner

import resource_registry.cli as cli

from conftest import DEPLOYER, NGO1

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_test_registry(monkeypatch, registry):
    monkeypatch.setattr(cli, "_registry", registry)
    # Keep structlog pointed at the real streams, not the runner's buffers
    monkeypatch.setattr(cli, "configure_logging", lambda settings=None: None)


def test_status_shows_admin(registry):
    result = runner.invoke(cli.app, ["status"])

    assert result.exit_code == 0
    assert DEPLOYER in result.output


def test_pause_and_unpause(registry):
    result = runner.invoke(cli.app, ["pause", "--caller", DEPLOYER])
    assert result.exit_code == 0
    assert registry.is_paused() is True

    result = runner.invoke(cli.app, ["unpause", "--caller", DEPLOYER])
    assert result.exit_code == 0
    assert registry.is_paused() is False


def test_pause_by_non_admin_fails(registry):
    result = runner.invoke(cli.app, ["pause", "--caller", NGO1])

    assert result.exit_code == 1
    assert "Unauthorized" in result.output
    assert registry.is_paused() is False


def test_set_admin(registry):
    result = runner.invoke(cli.app, ["set-admin", NGO1, "--caller", DEPLOYER])

    assert result.exit_code == 0
    assert registry.get_admin() == NGO1


def test_show_listing(registry, food_listing):
    result = runner.invoke(cli.app, ["show-listing", str(food_listing)])

    assert result.exit_code == 0
    assert NGO1 in result.output


def test_show_missing_listing(registry):
    result = runner.invoke(cli.app, ["show-listing", "5"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_history(registry, food_listing):
    registry.update_listing(NGO1, food_listing, quantity=10, notes="half")

    result = runner.invoke(cli.app, ["history", str(food_listing)])

    assert result.exit_code == 0
    assert "half" in result.output


def test_history_empty(registry, food_listing):
    result = runner.invoke(cli.app, ["history", str(food_listing)])

    assert result.exit_code == 0
    assert "No updates recorded" in result.output
