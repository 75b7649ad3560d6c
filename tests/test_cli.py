"""CLI unit tests for the DPE CLI."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner, Result

from delivery_pricing.cli import app
from delivery_pricing.cli.utils.helpers import ExitCode, exit_code_for, resolve_format
from delivery_pricing.errors import ClientNotFoundError, InvalidTierTableError


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing."""
    return CliRunner()


def _json(cli_runner: CliRunner, args: List[str]) -> Dict[str, Any]:
    result = cli_runner.invoke(app, ["--format", "json", *args])
    assert result.exit_code == ExitCode.SUCCESS, result.output
    return json.loads(result.stdout)


def _fail(cli_runner: CliRunner, args: List[str]) -> Result:
    return cli_runner.invoke(app, ["--format", "json", *args])


class TestHelpers:
    """Test CLI helper functions."""

    def test_resolve_format_explicit(self) -> None:
        """Test that an explicit format wins."""
        assert resolve_format("JSON") == "json"

    def test_resolve_format_non_tty(self) -> None:
        """Test that non-TTY output defaults to JSON."""
        with patch("sys.stdout.isatty", return_value=False):
            assert resolve_format(None) == "json"

    def test_exit_codes(self) -> None:
        """Test the mapping from errors to exit codes."""
        assert exit_code_for(ClientNotFoundError("x", client_id="x")) == ExitCode.CLIENT_NOT_FOUND
        assert exit_code_for(InvalidTierTableError("x")) == ExitCode.CONFIG_ERROR
        assert exit_code_for(click.BadParameter("x")) == ExitCode.INVALID_USAGE
        assert exit_code_for(RuntimeError("x")) == ExitCode.GENERIC_ERROR


class TestClientsCommands:
    """Test `dpe clients`."""

    def test_list_active(self, cli_runner: CliRunner) -> None:
        """Test listing active clients."""
        data = _json(cli_runner, ["clients", "list"])
        ids = [row["id"] for row in data["clients"]]
        assert data["default_client"] == "ready-set-food-standard"
        assert "cater-valley" in ids
        assert "ready-set-food-premium" not in ids
        assert data["count"] == 4

    def test_list_all(self, cli_runner: CliRunner) -> None:
        """Test that --all includes inactive clients."""
        data = _json(cli_runner, ["clients", "list", "--all"])
        assert data["count"] == 5

    def test_show(self, cli_runner: CliRunner) -> None:
        """Test showing a client's configuration in dollars."""
        data = _json(cli_runner, ["clients", "show", "cater-valley"])
        assert data["client_id"] == "cater-valley"
        assert len(data["tiers"]) == 5
        assert data["tiers"][0]["base_fee_within_radius"] == "42.50"
        assert data["policy"]["minimum_customer_fee"] == "42.50"
        assert data["policy"]["percentage_tier"]["rate"] == "0.1"
        assert data["rules"][0]["id"] == "cater-valley-base-fee"

    def test_show_unknown_client(self, cli_runner: CliRunner) -> None:
        """Test that an unknown client exits with CLIENT_NOT_FOUND."""
        result = _fail(cli_runner, ["clients", "show", "nope"])
        assert result.exit_code == ExitCode.CLIENT_NOT_FOUND
        assert "Client 'nope' is not configured" in result.output


class TestQuoteCommand:
    """Test `dpe quote`."""

    QUOTE = ["quote", "--client", "cater-valley", "--headcount", "35", "--food-cost", "450", "--mileage", "12"]

    def test_summary(self, cli_runner: CliRunner) -> None:
        """Test the default JSON summary."""
        data = _json(cli_runner, self.QUOTE)
        assert data["client_id"] == "cater-valley"
        assert data["delivery"]["delivery_fee"] == "96.00"
        assert data["delivery"]["total_mileage_pay"] == "6.00"
        assert data["driver"]["total_driver_pay"] == "31.40"

    def test_itemized(self, cli_runner: CliRunner) -> None:
        """Test the itemized JSON result."""
        data = _json(cli_runner, [*self.QUOTE, "--itemized"])
        assert data["tier_index"] == 2
        assert data["customer_charges"]["total"] == "96.00"
        assert data["driver_payments"]["total"] == "31.40"
        assert data["profit"] == "64.60"
        assert data["requires_manual_review"] is False

    def test_tips_and_bridge(self, cli_runner: CliRunner) -> None:
        """Test tip and bridge options flow into the calculation."""
        data = _json(
            cli_runner,
            ["quote", "--client", "cater-valley", "--headcount", "20", "--food-cost", "250", "--mileage", "8",
             "--tips", "15", "--bridge", "--itemized"],
        )
        assert data["driver_payments"]["base_pay"] == "0.00"
        assert data["driver_payments"]["bridge_toll"] == "8.00"
        assert data["driver_payments"]["total"] == "28.60"
        assert data["customer_charges"]["total"] == "42.50"

    def test_non_finite_mileage(self, cli_runner: CliRunner) -> None:
        """Test that an infinite mileage prices the order as zero miles."""
        data = _json(
            cli_runner,
            ["quote", "--client", "cater-valley", "--headcount", "20", "--food-cost", "250", "--mileage", "inf"],
        )
        assert data["driver"]["total_mileage_pay"] == "0.00"
        assert data["delivery"]["delivery_fee"] == "42.50"

    def test_area_toll(self, cli_runner: CliRunner) -> None:
        """Test that a tolled delivery area adds the bridge toll."""
        data = _json(
            cli_runner,
            ["quote", "--client", "ready-set-food-standard", "--headcount", "20", "--food-cost", "250",
             "--mileage", "5", "--area", "Oakland", "--ready-set-addon-fee", "2.50", "--itemized"],
        )
        assert data["customer_charges"]["bridge_toll"] == "8.00"
        assert data["customer_charges"]["total"] == "38.00"
        assert data["driver_payments"]["bridge_toll"] == "8.00"
        assert data["driver_payments"]["ready_set_total_fee"] == "80.50"

    def test_table_output(self, cli_runner: CliRunner) -> None:
        """Test the human-readable output."""
        result = cli_runner.invoke(app, ["--format", "table", "--no-color", *self.QUOTE])
        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert "Profit" in result.output

    def test_unknown_client(self, cli_runner: CliRunner) -> None:
        """Test that the CLI does not silently fall back to the default client."""
        result = _fail(cli_runner, ["quote", "--client", "nope", "--headcount", "10"])
        assert result.exit_code == ExitCode.CLIENT_NOT_FOUND

    def test_bad_amount(self, cli_runner: CliRunner) -> None:
        """Test that a non-numeric amount is a usage error."""
        result = _fail(cli_runner, ["quote", "--client", "kasa", "--food-cost", "lots"])
        assert result.exit_code == ExitCode.INVALID_USAGE
        assert "--food-cost" in result.output

    def test_missing_client_option(self, cli_runner: CliRunner) -> None:
        """Test that --client is required."""
        result = _fail(cli_runner, ["quote", "--headcount", "10"])
        assert result.exit_code == ExitCode.INVALID_USAGE


class TestConfigCommands:
    """Test `dpe config`."""

    def test_paths(self, cli_runner: CliRunner) -> None:
        """Test that the paths command reports the active file."""
        data = _json(cli_runner, ["config", "paths"])
        sources = data["config_sources"]
        assert sources["bundled"]["exists"] is True
        assert sources["environment"]["active"] is True

    def test_validate_bundled(self, cli_runner: CliRunner) -> None:
        """Test validating the active configuration."""
        data = _json(cli_runner, ["config", "validate"])
        assert data["valid"] is True
        assert "cater-valley" in data["clients"]

    def test_validate_invalid_file(
        self, cli_runner: CliRunner, write_clients: Callable[..., str], minimal_client: Dict[str, Any]
    ) -> None:
        """Test that an invalid file exits with CONFIG_ERROR."""
        minimal_client["tiers"][1]["headcount"] = [30, None]
        path = write_clients({"broken": minimal_client})
        result = _fail(cli_runner, ["config", "validate", path])
        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "gap" in result.output

    def test_clients_path_option(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test that --clients-path pointing at a missing file is a config error."""
        result = _fail(cli_runner, ["--clients-path", str(tmp_path / "missing.yaml"), "clients", "list"])
        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_clients_path_option_valid(
        self, cli_runner: CliRunner, write_clients: Callable[..., str], minimal_client: Dict[str, Any]
    ) -> None:
        """Test that --clients-path loads the given file."""
        path = write_clients({"only-client": minimal_client})
        result = cli_runner.invoke(app, ["--format", "json", "--clients-path", path, "clients", "list"])
        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert [row["id"] for row in json.loads(result.stdout)["clients"]] == ["only-client"]

    def test_init(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test copying the bundled file into the user config directory."""
        user_dir = tmp_path / "user"
        with patch("delivery_pricing.config_paths.platformdirs.user_config_dir", return_value=str(user_dir)):
            first = cli_runner.invoke(app, ["config", "init"])
            second = cli_runner.invoke(app, ["config", "init"])
        assert first.exit_code == ExitCode.SUCCESS, first.output
        assert "Created" in first.output
        assert (user_dir / "clients.yaml").is_file()
        assert "already exists" in second.output
