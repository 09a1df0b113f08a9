"""Test the click command line interface."""

from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from ga4_tracker import cli
from ga4_tracker.observability import logger as logger_module


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(logger_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.delenv("GA4_MEASUREMENT_ID", raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _mock_http(monkeypatch, status: int = 200) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(status, content=b"//"))
    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        httpx, "AsyncClient", lambda **kwargs: real_client(transport=transport, **kwargs),
    )


class TestValidate:
    def test_all_valid(self, runner):
        result = runner.invoke(
            cli.main,
            ["validate", "--measurement-id", "G-ABCDEF1234", "--currency", "EUR",
             "--event-name", "add_to_cart"],
        )
        assert result.exit_code == 0
        assert "measurement_id G-ABCDEF1234: ok" in result.output
        assert "currency EUR: ok" in result.output
        assert "event_name add_to_cart: ok" in result.output

    def test_invalid_measurement_id(self, runner):
        result = runner.invoke(cli.main, ["validate", "--measurement-id", "UA-1234-1"])
        assert result.exit_code == 1
        assert "invalid" in result.output

    def test_invalid_event_name_reports_reason(self, runner):
        result = runner.invoke(cli.main, ["validate", "--event-name", "1bad"])
        assert result.exit_code == 1
        assert "start with a letter" in result.output


class TestSend:
    def test_prints_data_layer(self, runner, monkeypatch):
        _mock_http(monkeypatch)
        result = runner.invoke(
            cli.main,
            ["send", "--measurement-id", "G-ABCDEF1234", "--event", "newsletter_optin",
             "--param", "list=weekly"],
        )
        assert result.exit_code == 0, result.output
        entries = [json.loads(line) for line in result.output.splitlines()]
        assert [e[0] for e in entries] == ["js", "config", "event"]
        assert entries[-1][1] == "newsletter_optin"
        assert entries[-1][2]["list"] == "weekly"

    def test_reads_config_file(self, runner, monkeypatch, tmp_path):
        _mock_http(monkeypatch)
        path = tmp_path / "ga4.toml"
        path.write_text('measurement_id = "G-FILE000001"\ncurrency = "EUR"\n')
        result = runner.invoke(
            cli.main, ["send", "--config", str(path), "--event", "login"],
        )
        assert result.exit_code == 0, result.output
        assert "G-FILE000001" in result.output

    def test_missing_measurement_id(self, runner):
        result = runner.invoke(cli.main, ["send", "--event", "login"])
        assert result.exit_code == 1
        assert "measurementId is required" in result.output

    def test_script_load_failure(self, runner, monkeypatch):
        _mock_http(monkeypatch, status=404)
        result = runner.invoke(
            cli.main, ["send", "--measurement-id", "G-ABCDEF1234", "--event", "login"],
        )
        assert result.exit_code == 1
        assert "HTTP 404" in result.output

    def test_bad_param(self, runner, monkeypatch):
        _mock_http(monkeypatch)
        result = runner.invoke(
            cli.main,
            ["send", "--measurement-id", "G-ABCDEF1234", "--event", "login", "--param", "oops"],
        )
        assert result.exit_code == 2
        assert "key=value" in result.output
