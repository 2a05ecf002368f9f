"""Tests for the click entry point."""

import json

from click.testing import CliRunner

from tc_info_exporter.collector.es_collector import EsCollector
from tc_info_exporter.main import cli


def test_inventory_json_with_mock():
    runner = CliRunner()
    result = runner.invoke(cli, ["--mock", "--env-file", "", "--collector.cbs", "inventory", "--json"])

    assert result.exit_code == 0, result.output
    records = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
    metrics = [r for r in records if "metric" in r]
    statuses = [r["status"] for r in records if "status" in r]

    assert {r["metric"] for r in metrics} == {"tc_info_es_instance", "tc_info_cbs_instance"}
    assert [s["collector"] for s in statuses] == ["es", "cbs"]
    assert all(s["ok"] for s in statuses)


def test_inventory_table_with_mock():
    runner = CliRunner()
    result = runner.invoke(cli, ["--mock", "--env-file", "", "inventory"])

    assert result.exit_code == 0, result.output
    assert "tc_info_es_instance" in result.output
    assert "Collectors" in result.output


def test_missing_credentials_exit_before_serving(monkeypatch):
    monkeypatch.delenv("TENCENTCLOUD_SECRET_ID", raising=False)
    monkeypatch.delenv("TENCENTCLOUD_SECRET_KEY", raising=False)

    runner = CliRunner()
    result = runner.invoke(cli, ["--env-file", "", "inventory"])
    assert result.exit_code == 1


def test_rejects_oversized_page():
    runner = CliRunner()
    result = runner.invoke(cli, ["--mock", "--page-size", "500", "inventory"])
    assert result.exit_code == 2


def test_client_construction_failure_exits(monkeypatch):
    monkeypatch.setenv("TENCENTCLOUD_SECRET_ID", "AKIDexample")
    monkeypatch.setenv("TENCENTCLOUD_SECRET_KEY", "secretexample")

    def broken_factory(credentials, region, profile):
        raise RuntimeError("no endpoint for region")

    monkeypatch.setattr(EsCollector, "default_client_factory", lambda self: broken_factory)

    runner = CliRunner()
    result = runner.invoke(cli, ["--env-file", "", "inventory"])
    assert result.exit_code == 1
