"""Tests for the ollama-manager entry point."""

import pytest

from ollama_manager import manager_cli
from ollama_manager.models import ollama_client
from ollama_manager.models.config import SCRIPT_VERSION
from ollama_manager.settings import get_setting, init_settings, set_setting
from conftest import FakeClient


@pytest.fixture
def cli(app_home, monkeypatch):
    monkeypatch.setattr(manager_cli.os, "geteuid", lambda: 1000)
    return app_home


def test_version(cli, capsys):
    assert manager_cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"Ollama Manager v{SCRIPT_VERSION}"


def test_help_includes_guide(cli, capsys):
    assert manager_cli.main(["--help"]) == 0
    out = capsys.readouterr().out
    assert "--quick-setup" in out
    assert "TROUBLESHOOTING" in out


def test_flags_are_mutually_exclusive(cli):
    with pytest.raises(SystemExit):
        manager_cli.main(["--monitor", "--optimize"])


def test_settings_set_and_show(cli, capsys):
    assert manager_cli.main(["settings", "--set", "auto_update=false"]) == 0
    assert get_setting("auto_update", True) is False

    assert manager_cli.main(["settings"]) == 0
    assert "auto_update: false" in capsys.readouterr().out


def test_settings_unknown_key(cli):
    assert manager_cli.main(["settings", "--set", "colour=blue"]) == 1


def test_settings_reset(cli):
    init_settings()
    set_setting("ui_mode", "tui")
    assert manager_cli.main(["settings", "--reset"]) == 0
    assert get_setting("ui_mode") == "cli"


def test_run_without_model(cli):
    assert manager_cli.main(["run"]) == 1


def test_run_last_used_model(cli, monkeypatch):
    init_settings()
    set_setting("last_used_model", "phi3:latest")
    client = FakeClient(installed=["phi3:latest"])
    monkeypatch.setattr(ollama_client, "get_client", lambda: client)

    assert manager_cli.main(["run"]) == 0
    assert client.ran == ["phi3:latest"]
    assert "Switched to model: phi3:latest" in cli.usage_log.read_text()


def test_preflight_creates_ollama_dir(cli):
    assert manager_cli.preflight(interactive_session=True) is True
    assert (cli.home / ".ollama").is_dir()


def test_preflight_root_declined(cli, monkeypatch):
    monkeypatch.setattr(manager_cli.os, "geteuid", lambda: 0)
    assert manager_cli.preflight(True, input_fn=lambda prompt: "n") is False
    assert manager_cli.preflight(False, input_fn=lambda prompt: "n") is True


def test_unexpected_error_is_logged(cli, monkeypatch, capsys):
    def boom(args):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(manager_cli, "cmd_analytics", boom)
    assert manager_cli.main(["analytics"]) == 1
    assert "Script exited with error code: 1" in capsys.readouterr().out
    assert "Script error: exit code 1" in cli.usage_log.read_text()
