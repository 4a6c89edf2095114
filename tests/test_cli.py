"""Tests for CLI commands via Click testing."""

import json
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from cursor_usage.cli import main
from cursor_usage.config import load_settings
from cursor_usage.models import Credential
from cursor_usage.store import CredentialStore

from conftest import TOKEN, USAGE_DATA


def _response(data):
    resp = MagicMock()
    resp.read.return_value = json.dumps(data).encode()
    resp.status = 200
    resp.__enter__ = lambda s: s
    resp.__exit__ = MagicMock(return_value=False)
    return resp


def test_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "cursor-usage" in result.output


def test_config_init():
    runner = CliRunner()
    result = runner.invoke(main, ["config", "init"])
    assert result.exit_code == 0
    assert "Config created" in result.output


def test_config_show():
    runner = CliRunner()
    runner.invoke(main, ["config", "init"])
    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 0
    assert "[api]" in result.output


def test_config_show_missing():
    runner = CliRunner()
    result = runner.invoke(main, ["config", "show"])
    assert result.exit_code == 1


def test_logout():
    store = CredentialStore(load_settings())
    store.save(Credential("user_x", TOKEN))
    runner = CliRunner()
    result = runner.invoke(main, ["logout"])
    assert result.exit_code == 0
    assert "removed" in result.output
    assert not store.credentials_file.exists()


def test_last_without_cache():
    runner = CliRunner()
    result = runner.invoke(main, ["last"])
    assert result.exit_code == 1


def test_last_with_cache():
    CredentialStore(load_settings()).save_cache(USAGE_DATA)
    runner = CliRunner()
    result = runner.invoke(main, ["last"])
    assert result.exit_code == 0
    assert "133 / 500 (26.6%)" in result.output


def test_interactive_manual_token():
    runner = CliRunner()
    with patch("cursor_usage.api.urllib.request.urlopen", return_value=_response(USAGE_DATA)):
        result = runner.invoke(main, [], input=f"2\n{TOKEN}\n")
    assert result.exit_code == 0
    assert "Remaining: 367 requests" in result.output
    assert CredentialStore(load_settings()).load().account_id == "user_TESTUSER123456789"


def test_last_with_corrupted_cache():
    store = CredentialStore(load_settings())
    store.cache_file.write_text(json.dumps({"data": {"gpt-4": {"numRequests": "x"}}}))
    runner = CliRunner()
    result = runner.invoke(main, ["last"])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert not store.cache_file.exists()


def test_subcommands_configure_logging():
    runner = CliRunner()
    with patch("cursor_usage.cli._setup_logging") as setup:
        result = runner.invoke(main, ["logout"])
    assert result.exit_code == 0
    setup.assert_called_once()
