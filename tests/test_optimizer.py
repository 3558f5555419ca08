"""Tests for optimization analysis and shell profile edits."""

import os

from ollama_manager import optimizer
from ollama_manager.models.config import GPU_ENV, OLLAMA_ENV
from ollama_manager.models.resource_monitor import RAMStats
from conftest import scripted_input


class FakeMonitor:
    def __init__(self, ram_gb, swap_gb, vram_gb):
        self.ram = RAMStats(total_gb=ram_gb, available_gb=ram_gb / 2, percent=50.0, swap_gb=swap_gb)
        self.vram = vram_gb

    def get_ram_stats(self):
        return self.ram

    def get_cached_vram(self):
        return self.vram


def test_shell_profile_prefers_zshrc(tmp_path):
    assert optimizer.shell_profile(tmp_path) == tmp_path / ".bashrc"
    (tmp_path / ".zshrc").write_text("")
    assert optimizer.shell_profile(tmp_path) == tmp_path / ".zshrc"


def test_append_exports(tmp_path):
    profile = tmp_path / ".bashrc"
    profile.write_text("alias ll='ls -l'\n")
    optimizer.append_exports({"OLLAMA_NUM_PARALLEL": "2", "OLLAMA_KEEP_ALIVE": "5m"},
                             "Ollama Performance Optimizations", profile)
    assert profile.read_text() == (
        "alias ll='ls -l'\n"
        "\n"
        "# Ollama Performance Optimizations\n"
        "export OLLAMA_NUM_PARALLEL=2\n"
        "export OLLAMA_KEEP_ALIVE=5m\n"
    )


def test_analyze_low_ram_low_swap(tmp_path):
    governor = tmp_path / "scaling_governor"
    governor.write_text("powersave\n")

    report = optimizer.analyze(FakeMonitor(8, 2, 0), governor_path=governor)
    assert report.low_ram and report.low_swap
    assert not report.has_gpu
    assert report.governor == "powersave"
    assert len(report.notes) == 3


def test_analyze_big_machine(tmp_path):
    report = optimizer.analyze(FakeMonitor(64, 0, 24), governor_path=tmp_path / "missing")
    assert not report.low_ram
    assert not report.low_swap
    assert report.has_gpu
    assert report.governor is None
    assert report.notes == []


def test_ollama_optimizations_written(tmp_path, monkeypatch):
    for key in OLLAMA_ENV:
        monkeypatch.setenv(key, "")
    profile = tmp_path / ".bashrc"
    optimizer.apply_ollama_optimizations(profile)

    text = profile.read_text()
    assert "export OLLAMA_NUM_PARALLEL=2" in text
    assert "export OLLAMA_MAX_QUEUE=10" in text
    assert "export OLLAMA_KEEP_ALIVE=5m" in text
    assert os.environ["OLLAMA_KEEP_ALIVE"] == "5m"


def test_gpu_settings_saved_only_when_confirmed(tmp_path, monkeypatch):
    for key in GPU_ENV:
        monkeypatch.setenv(key, "")
    profile = tmp_path / ".bashrc"

    assert optimizer.optimize_gpu_settings(scripted_input("n"), profile) is False
    assert not profile.exists()

    assert optimizer.optimize_gpu_settings(scripted_input("y"), profile) is True
    assert "export OLLAMA_MAX_LOADED_MODELS=3" in profile.read_text()


def test_swap_requires_root(monkeypatch, tmp_path):
    monkeypatch.setattr(optimizer.os, "geteuid", lambda: 1000)
    assert optimizer.create_swap_file(tmp_path / "swapfile") is False
