"""Tests for dependency checks, ollama updates and model installs."""

import subprocess

import pytest

from ollama_manager import installer
from ollama_manager.settings import get_setting, init_settings, set_setting
from conftest import FakeClient, scripted_input


def test_install_model_success_adds_preferred(app_home):
    init_settings()
    client = FakeClient()

    assert installer.install_model("phi3", client) is True
    assert client.pulled == ["phi3"]
    assert get_setting("preferred_models") == ["phi3"]
    assert "Installing model: phi3" in app_home.usage_log.read_text()


def test_install_model_failure(app_home):
    init_settings()
    client = FakeClient(pull_ok=False)

    assert installer.install_model("nope", client) is False
    assert get_setting("preferred_models") == []


def test_install_models_skips_blank(app_home):
    init_settings()
    client = FakeClient()
    results = installer.install_models(["phi3", "  ", "mistral"], client)
    assert results == {"phi3": True, "mistral": True}


def test_install_packages_unsupported_os(monkeypatch):
    monkeypatch.setattr(installer.subprocess, "run",
                        lambda *a, **kw: pytest.fail("should not run a package manager"))
    assert installer.install_packages(["jq"], os_id="plan9") is False


def test_install_packages_apt(monkeypatch):
    calls = []
    monkeypatch.setattr(installer.subprocess, "run",
                        lambda cmd, **kw: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0))
    assert installer.install_packages(["jq", "git"], os_id="debian") is True
    assert calls == [["sudo", "apt", "update"], ["sudo", "apt", "install", "-y", "jq", "git"]]


def test_install_packages_pacman(monkeypatch):
    calls = []
    monkeypatch.setattr(installer.subprocess, "run",
                        lambda cmd, **kw: calls.append(cmd) or subprocess.CompletedProcess(cmd, 0))
    assert installer.install_packages(["fzf"], os_id="manjaro") is True
    assert calls == [["sudo", "pacman", "-S", "--needed", "fzf"]]


def test_install_packages_brew_missing(monkeypatch):
    monkeypatch.setattr(installer.shutil, "which", lambda name: None)
    assert installer.install_packages(["jq"], os_id="macos") is False


class UpdatableClient(FakeClient):
    def __init__(self, current, latest, install_ok=True):
        super().__init__()
        self.current = current
        self.latest = latest
        self.install_ok = install_ok
        self.install_runs = 0

    def get_version(self):
        return self.current

    def get_latest_version(self):
        return self.latest

    def run_install_script(self):
        self.install_runs += 1
        return self.install_ok


def test_update_applied_automatically(app_home):
    init_settings()
    client = UpdatableClient("0.3.0", "0.3.12")

    assert installer.check_ollama_update(client, scripted_input()) is True
    assert client.install_runs == 1
    assert "Ollama updated to 0.3.12" in app_home.usage_log.read_text()


def test_update_needs_confirmation_without_auto_update(app_home):
    init_settings()
    set_setting("auto_update", False)
    client = UpdatableClient("0.3.0", "0.3.12")

    assert installer.check_ollama_update(client, scripted_input("n")) is False
    assert client.install_runs == 0


def test_no_update_when_current(app_home):
    init_settings()
    client = UpdatableClient("0.3.12", "0.3.12")
    assert installer.check_ollama_update(client, scripted_input()) is False
    assert client.install_runs == 0


def test_no_update_when_latest_unknown(app_home):
    init_settings()
    client = UpdatableClient("0.3.0", None)
    assert installer.check_ollama_update(client, scripted_input()) is False


def test_missing_tools(monkeypatch):
    monkeypatch.setattr(installer.shutil, "which", lambda name: None if name == "jq" else "/bin/x")
    assert installer.missing_tools(["curl", "jq", "git"]) == ["jq"]


class FixedOS:
    def __init__(self, os_id):
        self.os_id = os_id

    def detect_os(self):
        return self.os_id


@pytest.fixture
def on_os(monkeypatch):
    def _set(os_id):
        monkeypatch.setattr(installer, "get_monitor", lambda: FixedOS(os_id))
    return _set


def test_install_ollama_linux_runs_script(app_home, on_os):
    on_os("ubuntu")
    client = FakeClient(binary_present=False)

    assert installer.install_ollama(client, scripted_input()) is True
    assert client.script_runs == 1
    assert "Ollama installed" in app_home.usage_log.read_text()


def test_install_ollama_linux_script_fails(app_home, on_os):
    on_os("fedora")
    client = FakeClient(binary_present=False, install_ok=False)

    assert installer.install_ollama(client, scripted_input()) is False
    assert not app_home.usage_log.exists()


def test_install_ollama_macos_homebrew(app_home, on_os, monkeypatch):
    on_os("macos")
    calls = []
    monkeypatch.setattr(installer, "install_packages", lambda pkgs, os_id=None: calls.append((pkgs, os_id)) or True)

    assert installer.install_ollama(FakeClient(), scripted_input("y")) is True
    assert calls == [(["ollama"], "macos")]
    assert "Ollama installed" in app_home.usage_log.read_text()


def test_install_ollama_macos_manual_download(app_home, on_os, monkeypatch):
    on_os("macos")
    opened = []
    monkeypatch.setattr(installer.webbrowser, "open", opened.append)

    assert installer.install_ollama(FakeClient(), scripted_input("n")) is False
    assert opened == [installer.DOWNLOAD_PAGE_URL]
    assert not app_home.usage_log.exists()


def test_install_ollama_unsupported_os(app_home, on_os):
    on_os("unknown")
    client = FakeClient(binary_present=False)

    assert installer.install_ollama(client, scripted_input()) is False
    assert client.script_runs == 0


def test_check_or_install_installs_and_starts_server(app_home, on_os):
    init_settings()
    on_os("debian")
    client = FakeClient(binary_present=False, serving=False)

    assert installer.check_or_install_ollama(client, scripted_input()) is True
    assert client.script_runs == 1
    assert client.start_calls == 1


def test_check_or_install_leaves_running_server(app_home):
    init_settings()
    client = FakeClient(serving=True)

    assert installer.check_or_install_ollama(client, scripted_input()) is True
    assert client.script_runs == 0
    assert client.start_calls == 0


def test_check_or_install_stops_when_install_fails(app_home, on_os):
    on_os("unknown")
    client = FakeClient(binary_present=False, serving=False)

    assert installer.check_or_install_ollama(client, scripted_input()) is False
    assert client.start_calls == 0
