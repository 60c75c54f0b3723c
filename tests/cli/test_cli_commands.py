"""Test main CLI commands."""
import json

from typer.testing import CliRunner

from tradedashboard.cli.main import app
from tradedashboard.testing.state import make_state, write_state_file


def test_cli_show_state(state_file):
    """show-state prints metrics and trades from a local state file."""

    environment = {
        "STATE_FILE": str(state_file),
        "BLOB_READ_WRITE_TOKEN": None,
        "LOG_LEVEL": "disabled",
    }

    runner = CliRunner()
    result = runner.invoke(app, ["show-state", "--symbol", "BTC"], env=environment)

    if result.exception:
        raise result.exception

    assert result.exit_code == 0
    assert "State last updated: 2024-05-01 12:00:00" in result.stdout
    assert "$19,500.00" in result.stdout
    assert "Latest trades, 2 total" in result.stdout
    assert "Momentum is up" in result.stdout


def test_cli_show_state_missing(tmp_path):
    """show-state fails when the bot has not written state yet."""

    environment = {
        "STATE_FILE": str(tmp_path / "missing.json"),
        "BLOB_READ_WRITE_TOKEN": None,
        "LOG_LEVEL": "disabled",
    }

    runner = CliRunner()
    result = runner.invoke(app, "show-state", env=environment)
    assert result.exit_code != 0
    assert "Start the trading bot first" in str(result.exception)


def test_cli_upload_state(state_file, state_data, mocker):
    """upload-state posts the file with the API key."""

    resp = mocker.Mock(ok=True)
    resp.json.return_value = {
        "success": True,
        "url": "https://blob.example.com/trading-state.json",
        "timestamp": "2024-05-01T12:00:00",
    }
    post = mocker.patch("tradedashboard.cli.commands.upload_state.requests.post", return_value=resp)

    environment = {
        "DASHBOARD_URL": "https://dashboard.example.com/",
        "UPLOAD_API_KEY": "upload-secret",
        "STATE_FILE": str(state_file),
        "LOG_LEVEL": "disabled",
    }

    runner = CliRunner()
    result = runner.invoke(app, "upload-state", env=environment)

    if result.exception:
        raise result.exception

    post.assert_called_once()
    assert post.call_args.args == ("https://dashboard.example.com/api/upload",)
    assert post.call_args.kwargs["headers"] == {"x-api-key": "upload-secret"}
    assert post.call_args.kwargs["json"] == json.loads(state_file.read_text())
    assert "blob https://blob.example.com/trading-state.json" in result.stdout


def test_cli_show_state_no_traders(tmp_path):
    """show-state works before the bot has started any traders."""
    state_file = write_state_file(tmp_path / "state.json", make_state({}))

    environment = {
        "STATE_FILE": str(state_file),
        "BLOB_READ_WRITE_TOKEN": None,
        "LOG_LEVEL": "disabled",
    }

    runner = CliRunner()
    result = runner.invoke(app, "show-state", env=environment)

    if result.exception:
        raise result.exception

    assert "No traders" in result.stdout
    assert "No trades" in result.stdout
