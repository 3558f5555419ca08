"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from ollama_manager.models.config import get_paths


@pytest.fixture
def app_home(tmp_path, monkeypatch):
    """Point HOME, the config dir and the backup dir at a temp tree."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("OLLAMA_MANAGER_HOME", str(home / ".config" / "ollama-manager"))
    monkeypatch.setenv("OLLAMA_MANAGER_BACKUPS", str(home / ".ollama-backups"))
    return get_paths()


class FakeClient:
    """Stands in for OllamaClient without touching the ollama binary."""

    binary = "ollama"
    host = "http://localhost:11434"

    def __init__(self, installed: Optional[List[str]] = None, pull_ok: bool = True,
                 binary_present: bool = True, serving: bool = True, install_ok: bool = True):
        self.installed = list(installed or [])
        self.pull_ok = pull_ok
        self.pulled: List[str] = []
        self.ran: List[str] = []
        self.prompted: List[str] = []
        self.removed: List[str] = []
        self.summaries: Dict[str, str] = {}
        self.binary_present = binary_present
        self.serving = serving
        self.install_ok = install_ok
        self.script_runs = 0
        self.start_calls = 0
        self.version = "0.3.12"

    def is_installed(self):
        return self.binary_present

    def is_serving(self):
        return self.serving

    def start_server(self, wait=3.0):
        self.start_calls += 1
        self.serving = True
        return True

    def run_install_script(self):
        self.script_runs += 1
        if self.install_ok:
            self.binary_present = True
        return self.install_ok

    def get_version(self):
        return self.version

    def get_latest_version(self):
        return self.version

    def list_models(self):
        return sorted(self.installed)

    def has_model(self, name):
        return any(m.startswith(name) for m in self.installed)

    def pull_model(self, name, progress_callback=None):
        self.pulled.append(name)
        if self.pull_ok and name not in self.installed:
            self.installed.append(name)
        return self.pull_ok

    def model_summary(self, name):
        return self.summaries.get(name, "")

    def run_model(self, name):
        self.ran.append(name)
        return 0

    def prompt_model(self, name, prompt, timeout=None):
        self.prompted.append(name)
        return True

    def remove_model(self, name):
        self.removed.append(name)
        self.installed.remove(name)
        return True

    def is_available(self):
        return True


@pytest.fixture
def fake_client():
    return FakeClient(installed=["llama3.1:latest", "phi3:latest"])


def scripted_input(*answers):
    """input() replacement that replays answers in order."""
    queue = list(answers)

    def _input(prompt=""):
        if not queue:
            raise EOFError
        return queue.pop(0)

    return _input


def write_log(path: Path, *messages):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a") as f:
        for i, message in enumerate(messages):
            f.write(f"2024-05-01 10:{i:02d}:00 - {message}\n")
