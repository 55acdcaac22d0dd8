import pytest
from typer.testing import CliRunner

from page_factory.cli import main as cli

runner = CliRunner()


def test_doctor_prints_timeout_table() -> None:
    result = runner.invoke(cli.app, ["doctor"])
    assert result.exit_code == 0, result.output
    assert "page-factory" in result.output
    for name in ("CLICK", "PRESENCE", "PAGE_LOAD", "POLLING_WITH_REFRESH", "FIVE_SECONDS"):
        assert name in result.output
    assert "DEFAULT" not in result.output


def test_doctor_rejects_bad_timeouts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli.settings, "click_timeout_seconds", 0)
    result = runner.invoke(cli.app, ["doctor"])
    assert result.exit_code == 2
    assert "invalid timeout configuration" in result.output


def test_open_rejects_bad_timeouts_before_starting_a_browser(monkeypatch: pytest.MonkeyPatch) -> None:
    def no_browser(*args, **kwargs):
        raise AssertionError("browser started")

    monkeypatch.setattr(cli.settings, "click_timeout_seconds", 0)
    monkeypatch.setattr(cli, "PlaywrightDriver", no_browser)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    result = runner.invoke(cli.app, ["open", "http://app.test/login"])
    assert result.exit_code == 2
    assert "[open]" in result.output
    assert "invalid timeout configuration" in result.output
