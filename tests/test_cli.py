"""Tests for the Typer command-line interface."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from represent.cli import app
from represent.errors import GeocodeError
from represent.models import Office, Official, ResolutionResult

runner = CliRunner()


@pytest.fixture
def cli_settings(test_settings):
    with patch("represent.cli.get_settings", return_value=test_settings), patch(
        "represent.cli.setup_logging"
    ):
        yield test_settings


def _result() -> ResolutionResult:
    result = ResolutionResult(normalized_address="100 W RANDOLPH ST, CHICAGO, IL, 60601")
    result.add(
        Official(name="Richard Durbin", party="Democrat", phones=("202-224-2152",)),
        Office(name="United States Senator", levels=["country"], roles=["legislatorUpperBody"]),
    )
    return result


class TestLookupCommand:
    """Tests for the lookup command."""

    def test_prints_table(self, cli_settings):
        """Test that legislators are rendered as a table."""
        with patch("represent.cli.resolve", new=AsyncMock(return_value=_result())) as resolve:
            outcome = runner.invoke(app, ["lookup", "100 W Randolph St, Chicago, IL 60601"])

        assert outcome.exit_code == 0
        assert "Richard Durbin" in outcome.stdout
        assert "United States Senator" in outcome.stdout
        resolve.assert_awaited_once_with("100 W Randolph St, Chicago, IL 60601", cli_settings)

    def test_prints_json(self, cli_settings):
        """Test the --json output shape."""
        with patch("represent.cli.resolve", new=AsyncMock(return_value=_result())):
            outcome = runner.invoke(app, ["lookup", "--json", "100 W Randolph St, Chicago"])

        assert outcome.exit_code == 0
        data = json.loads(outcome.stdout)
        assert data["officials"][0]["name"] == "Richard Durbin"
        assert data["offices"][0]["officialIndices"] == [0]

    def test_resolution_error_exits_nonzero(self, cli_settings):
        """Test that a geocode failure is reported with exit code 1."""
        error = GeocodeError("No geocoding match found for address")
        with patch("represent.cli.resolve", new=AsyncMock(side_effect=error)):
            outcome = runner.invoke(app, ["lookup", "nowhere in particular"])

        assert outcome.exit_code == 1
        assert "failed-precondition" in outcome.stdout


class TestRefreshDatasetCommand:
    """Tests for the refresh-dataset command."""

    def test_writes_dataset(self, cli_settings, tmp_path):
        """Test a successful refresh to an explicit path."""
        target = tmp_path / "out.json"
        records = [{"id": {"bioguide": "D000563"}}]
        with patch("represent.cli.download_dataset", new=AsyncMock(return_value=records)):
            outcome = runner.invoke(app, ["refresh-dataset", "--output", str(target)])

        assert outcome.exit_code == 0
        assert json.loads(target.read_text(encoding="utf-8")) == records

    def test_mirrors_fail_without_key(self, cli_settings, tmp_path):
        """Test that failing mirrors and no Congress.gov key exits with code 1."""
        failure = RuntimeError("no dataset mirror succeeded")
        with patch("represent.cli.download_dataset", new=AsyncMock(side_effect=failure)):
            outcome = runner.invoke(app, ["refresh-dataset", "-o", str(tmp_path / "out.json")])

        assert outcome.exit_code == 1
        assert "CONGRESS_API_KEY is required" in outcome.stdout
        assert not (tmp_path / "out.json").exists()

    def test_mirrors_fail_builds_from_congress(self, cli_settings, tmp_path):
        """Test the Congress.gov build is written when every mirror fails."""
        target = tmp_path / "out.json"
        built = [{"id": {"bioguide": "D000563"}, "roles": [{"type": "senator", "state": "IL"}]}]
        failure = RuntimeError("no dataset mirror succeeded")
        with patch("represent.cli.download_dataset", new=AsyncMock(side_effect=failure)), patch(
            "represent.cli.build_from_congress", new=AsyncMock(return_value=built)
        ) as build:
            outcome = runner.invoke(app, ["refresh-dataset", "-o", str(target)])

        assert outcome.exit_code == 0
        build.assert_awaited_once()
        assert json.loads(target.read_text(encoding="utf-8")) == built

    def test_repair_option(self, cli_settings, tmp_path):
        """Test that --repair passes downloaded records through repair_records."""
        target = tmp_path / "out.json"
        records = [{"id": {"bioguide": "D000563"}, "roles": [{"type": "senator"}]}]
        repaired = [{"id": {"bioguide": "D000563"}, "roles": [{"type": "senator", "state": "IL"}]}]
        with patch("represent.cli.download_dataset", new=AsyncMock(return_value=records)), patch(
            "represent.cli.repair_records", new=AsyncMock(return_value=(repaired, 1))
        ) as repair:
            outcome = runner.invoke(app, ["refresh-dataset", "--repair", "-o", str(target)])

        assert outcome.exit_code == 0
        assert "Repaired 1 legislators" in outcome.stdout
        assert repair.await_args.args[0] == records
        assert json.loads(target.read_text(encoding="utf-8")) == repaired
