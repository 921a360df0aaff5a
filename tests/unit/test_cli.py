"""Unit tests for the ptrigger CLI."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx
import structlog
from typer.testing import CliRunner

from provision_trigger.cli import app

EXAMPLES = Path(__file__).resolve().parents[2] / "examples"
CLOUD_PAGE = str(EXAMPLES / "cloud_page.html")
LEGACY_PAGE = str(EXAMPLES / "legacy_page.html")
PROVISION_URL = "http://jenkins.example/cloud/openstack/provision"

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestValidate:
    def test_builtin_defaults(self):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "Valid" in result.output
        assert "async_requester" in result.output

    def test_config_file(self, tmp_path: Path):
        cfg = tmp_path / "trigger.yaml"
        cfg.write_text("strategy: form_relay\ncsrf:\n  mode: none\n")
        result = runner.invoke(app, ["validate", "--config", str(cfg)])
        assert result.exit_code == 0
        assert "form_relay" in result.output

    def test_invalid_config_exits_nonzero(self, tmp_path: Path):
        cfg = tmp_path / "trigger.yaml"
        cfg.write_text("strategy: carrier_pigeon\n")
        result = runner.invoke(app, ["validate", "--config", str(cfg)])
        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_missing_config_exits_nonzero(self, tmp_path: Path):
        result = runner.invoke(
            app, ["validate", "--config", str(tmp_path / "nope.yaml")]
        )
        assert result.exit_code == 1


class TestScan:
    def test_lists_triggers(self):
        result = runner.invoke(app, ["scan", CLOUD_PAGE])
        assert result.exit_code == 0
        assert "ubuntu-small" in result.output
        assert "centos-large" in result.output

    def test_page_without_triggers(self, tmp_path: Path):
        page = tmp_path / "empty.html"
        page.write_text("<html><body></body></html>")
        result = runner.invoke(app, ["scan", str(page)])
        assert result.exit_code == 0
        assert "No triggers found" in result.output

    def test_missing_page(self, tmp_path: Path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing.html")])
        assert result.exit_code == 1
        assert "Page not found" in result.output


class TestActivate:
    def test_async_success(self, respx_mock: respx.MockRouter):
        route = respx_mock.post(PROVISION_URL).mock(
            return_value=httpx.Response(200, text="<ok>Provisioning started</ok>")
        )
        result = runner.invoke(
            app,
            [
                "activate",
                CLOUD_PAGE,
                "ubuntu-small",
                "--base-url",
                "http://jenkins.example",
            ],
        )
        assert result.exit_code == 0
        assert "Provisioning started" in result.output
        assert route.call_count == 1
        request = route.calls[0].request
        assert request.content == b"name=ubuntu-small"
        assert request.headers["Jenkins-Crumb"] == "c0ffee"

    def test_async_failure_exits_nonzero(self, respx_mock: respx.MockRouter):
        respx_mock.post(PROVISION_URL).mock(
            return_value=httpx.Response(500, text="quota exceeded")
        )
        result = runner.invoke(
            app,
            [
                "activate",
                CLOUD_PAGE,
                "centos-large",
                "--base-url",
                "http://jenkins.example",
            ],
        )
        assert result.exit_code == 1

    def test_unknown_template(self):
        result = runner.invoke(app, ["activate", CLOUD_PAGE, "no-such-image"])
        assert result.exit_code == 1
        assert "No trigger for template" in result.output

    def test_missing_anchor(self, tmp_path: Path):
        page = tmp_path / "bare.html"
        page.write_text(
            "<button data-type='os-provision' data-url='x' data-cloud='/c'></button>"
        )
        result = runner.invoke(app, ["activate", str(page), "x"])
        assert result.exit_code == 1
        assert "notification-bar" in result.output

    def test_form_relay_submits(self, tmp_path: Path, respx_mock: respx.MockRouter):
        route = respx_mock.post(PROVISION_URL).mock(
            return_value=httpx.Response(200, text="<ok>Provisioning started</ok>")
        )
        cfg = tmp_path / "trigger.yaml"
        cfg.write_text(
            "strategy: form_relay\nbase_url: http://jenkins.example\n"
        )
        result = runner.invoke(
            app, ["activate", LEGACY_PAGE, "ubuntu-small", "--config", str(cfg)]
        )
        assert result.exit_code == 0
        assert "Submitted" in result.output
        assert b"template=ubuntu-small" in route.calls[0].request.content

    def test_form_relay_error_status_exits_nonzero(
        self, tmp_path: Path, respx_mock: respx.MockRouter
    ):
        respx_mock.post(PROVISION_URL).mock(
            return_value=httpx.Response(400, text="<error>No such template</error>")
        )
        cfg = tmp_path / "trigger.yaml"
        cfg.write_text("strategy: form_relay\n")
        result = runner.invoke(
            app,
            [
                "activate",
                LEGACY_PAGE,
                "ubuntu-small",
                "--config",
                str(cfg),
                "--base-url",
                "http://jenkins.example",
            ],
        )
        assert result.exit_code == 1
