"""Tests for the placecheck command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from placecheck import __version__
from placecheck.buildings.schemas import BuildingFactsResult, BuildingQuery, Canonical
from placecheck.cli import main as cli
from placecheck.evidence.schemas import Verdict
from placecheck.factcheck.schemas import ClaimResult, FactCheckResult

runner = CliRunner()


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep log lines out of the captured output so JSON stays parseable."""
    monkeypatch.setattr(cli.settings, "log_level", "ERROR")


# ── Helpers ───────────────────────────────────────────────────────────────


def _building_result() -> BuildingFactsResult:
    return BuildingFactsResult(
        query=BuildingQuery(lat=48.2, lon=16.38, locale="de-AT"),
        canonical=Canonical(lat=48.2, lon=16.38),
        verdict=Verdict.UNCERTAIN,
        confidence=0.0,
        notes=["Overpass data unavailable."],
    )


def _fact_check_result() -> FactCheckResult:
    return FactCheckResult(
        question="Ungargasse 5 was built in 1871.",
        claims=[ClaimResult(text="Ungargasse 5 was built in 1871", verdict=Verdict.UNCERTAIN, confidence=0.2)],
        verdict=Verdict.UNCERTAIN,
        confidence=0.14,
    )


class TestInfoCommands:
    def test_version(self):
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_status(self):
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 0
        assert "Overpass" in result.output
        assert "Wikidata" in result.output


class TestBuilding:
    def test_location_required(self):
        result = runner.invoke(cli.app, ["building", "--lat", "48.2"])
        assert result.exit_code == 2

    def test_json_output(self, monkeypatch):
        seen = {}

        async def fake_building(address, lat, lon, locale, min_sources, now):
            seen.update(lat=lat, lon=lon, now=now)
            return _building_result()

        monkeypatch.setattr(cli, "_building", fake_building)

        result = runner.invoke(
            cli.app,
            ["building", "--lat", "48.2", "--lon", "16.38", "--now", "2024-03-01", "--json"],
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["verdict"] == "uncertain"
        assert payload["notes"] == ["Overpass data unavailable."]
        assert "summary" not in payload
        assert seen == {"lat": 48.2, "lon": 16.38, "now": "2024-03-01"}

    def test_rendered_output(self, monkeypatch):
        async def fake_building(*args):
            return _building_result()

        monkeypatch.setattr(cli, "_building", fake_building)

        result = runner.invoke(cli.app, ["building", "--lat", "48.2", "--lon", "16.38"])

        assert result.exit_code == 0
        assert "Canonical" in result.output
        assert "Overpass data unavailable." in result.output

    def test_failure_exits_nonzero(self, monkeypatch):
        async def failing(*args):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "_building", failing)

        result = runner.invoke(cli.app, ["building", "--address", "Ungargasse 5"])

        assert result.exit_code == 1
        assert "boom" in result.output


class TestVerify:
    def test_reads_stdin(self, monkeypatch):
        seen = {}

        async def fake_verify(paragraph, min_sources, now, open_pages):
            seen["paragraph"] = paragraph
            return _fact_check_result()

        monkeypatch.setattr(cli, "_verify", fake_verify)

        result = runner.invoke(cli.app, ["verify", "-", "--json"], input="Ungargasse 5 was built in 1871.")

        assert result.exit_code == 0
        assert seen["paragraph"] == "Ungargasse 5 was built in 1871."
        assert json.loads(result.stdout)["confidence"] == 0.14

    def test_json_omits_absent_fields(self, monkeypatch):
        async def fake_verify(*args):
            return _fact_check_result()

        monkeypatch.setattr(cli, "_verify", fake_verify)

        result = runner.invoke(cli.app, ["verify", "Ungargasse 5 was built in 1871.", "--json"])

        assert result.exit_code == 0
        assert "null" not in result.stdout
        payload = json.loads(result.stdout)
        assert "gaps_or_caveats" not in payload
        assert "notes" not in payload["claims"][0]

    def test_table_output(self, monkeypatch):
        async def fake_verify(*args):
            return _fact_check_result()

        monkeypatch.setattr(cli, "_verify", fake_verify)

        result = runner.invoke(cli.app, ["verify", "Ungargasse 5 was built in 1871."])

        assert result.exit_code == 0
        assert "Overall" in result.output
