"""Tests for the interactive menu screens, driven by scripted input."""

import tarfile
from datetime import datetime

import pytest

from ollama_manager import menu as menu_module
from ollama_manager.menu import MAIN_OPTIONS, ManagerMenu
from ollama_manager.models.resource_monitor import CPUStats, RAMStats, SystemStats
from ollama_manager.settings import get_setting, init_settings, set_setting
from conftest import FakeClient, scripted_input, write_log


class FakeMonitor:
    def __init__(self, ram_gb=8, vram_gb=0):
        self.ram = RAMStats(total_gb=ram_gb, available_gb=ram_gb // 2, percent=50.0, swap_gb=0)
        self.vram = vram_gb

    def get_ram_stats(self):
        return self.ram

    def get_cached_vram(self):
        return self.vram

    def get_stats(self):
        return SystemStats(timestamp=datetime(2024, 5, 1), os="ubuntu", gpu=None,
                           cpu=CPUStats(cores=8, threads_per_core=2, arch="x86_64"), ram=self.ram)

    def format_stats(self, stats):
        return f"RAM: {stats.ram.total_gb}GB"


def make_menu(client, *answers, ram_gb=8, clock=None):
    kwargs = {"clock": clock} if clock else {}
    return ManagerMenu(client=client, monitor=FakeMonitor(ram_gb), input_fn=scripted_input(*answers), **kwargs)


@pytest.fixture
def settings(app_home):
    init_settings()
    return app_home


def test_model_installer_vision_category(settings):
    client = FakeClient()
    picked = make_menu(client, "5", "1").model_installer()

    assert picked == ["llava"]
    assert client.pulled == ["llava"]
    assert get_setting("preferred_models") == ["llava"]


def test_model_installer_select_all_filters_by_ram(settings):
    client = FakeClient()
    picked = make_menu(client, "6", "all", ram_gb=1).model_installer()
    assert picked == ["all-minilm"]


def test_model_installer_invalid_category(settings):
    client = FakeClient()
    assert make_menu(client, "9").model_installer() == []
    assert client.pulled == []


def test_model_switcher_runs_and_records(settings, fake_client):
    model = make_menu(fake_client, "2").model_switcher()

    assert model == "phi3:latest"
    assert fake_client.ran == ["phi3:latest"]
    assert get_setting("last_used_model") == "phi3:latest"
    assert "Switched to model: phi3:latest" in settings.usage_log.read_text()


def test_model_switcher_invalid_choice(settings, fake_client):
    assert make_menu(fake_client, "7").model_switcher() is None
    assert fake_client.ran == []


def test_model_switcher_nothing_installed(settings):
    assert make_menu(FakeClient()).model_switcher() is None


def test_search(settings, fake_client, capsys):
    results = make_menu(fake_client).search("vision")
    assert [m.name for m in results] == ["llava"]
    assert "[AVAILABLE]" in capsys.readouterr().out


def test_search_empty_term(settings, fake_client):
    assert make_menu(fake_client, "").search() == []


def test_performance_test_logs_whole_seconds(settings, fake_client):
    ticks = iter([100.0, 103.7])
    timings = make_menu(fake_client, "1", clock=lambda: next(ticks)).performance_test()

    assert timings == {"llama3.1:latest": 3}
    assert fake_client.prompted == ["llama3.1:latest"]
    assert "Performance test: llama3.1:latest - 3s" in settings.usage_log.read_text()


def test_bulk_remove_unused(settings, fake_client):
    write_log(settings.usage_log, "Switched to model: phi3:latest")
    make_menu(fake_client, "2", "y").bulk_operations()
    assert fake_client.removed == ["llama3.1:latest"]


def test_bulk_import_list(settings, tmp_path):
    listing = tmp_path / "list.txt"
    listing.write_text("phi3\nmistral\n")
    client = FakeClient()

    make_menu(client, "4", str(listing)).bulk_operations()
    assert client.pulled == ["phi3", "mistral"]


def test_usage_analytics(settings, fake_client):
    write_log(
        settings.usage_log,
        "Installing model: phi3",
        "Switched to model: phi3:latest",
        "Switched to model: phi3:latest",
        "Ollama updated to 0.3.12",
    )
    stats = make_menu(fake_client).usage_analytics()
    assert stats == {"switches": 2, "installs": 1, "updates": 1}


def test_usage_analytics_without_log(settings, fake_client):
    assert make_menu(fake_client).usage_analytics() is None


def test_ui_config_cli_only(settings, fake_client, monkeypatch):
    monkeypatch.setattr(menu_module.shutil, "which", lambda name: None)
    set_setting("ui_mode", "tui")

    mode = make_menu(fake_client, "n", "1").ui_config()
    assert mode == "cli"
    assert get_setting("ui_mode") == "cli"
    assert "UI mode changed to: cli" in settings.usage_log.read_text()


def test_ui_config_with_fzf(settings, fake_client, monkeypatch):
    monkeypatch.setattr(menu_module.shutil, "which", lambda name: "/usr/bin/fzf" if name == "fzf" else None)
    assert make_menu(fake_client, "2").ui_config() == "tui"


def test_dispatch_exit_and_invalid(settings, fake_client):
    menu = make_menu(fake_client)
    assert menu.dispatch(len(MAIN_OPTIONS) - 1) is False
    assert menu.dispatch(None) is True


def test_run_exits_on_exit_option(settings, fake_client, capsys):
    make_menu(fake_client, str(len(MAIN_OPTIONS))).run(pause=0)
    assert "Thanks for using Ollama Manager" in capsys.readouterr().out


def test_run_stops_at_end_of_input(settings, fake_client):
    make_menu(fake_client, "99").run(pause=0)


def test_show_specs_prints_rating(settings, fake_client, capsys):
    stats = make_menu(fake_client, ram_gb=16).show_specs()
    assert stats.ram.total_gb == 16
    assert "AI Performance Rating: Good ✅" in capsys.readouterr().out


def test_corrupt_backup_does_not_end_session(settings, fake_client, capsys):
    settings.backup_dir.mkdir(parents=True)
    (settings.backup_dir / "ollama-backup-20240101-000000.tar.gz").write_bytes(b"not a tarball")

    make_menu(fake_client, "9", "2", "1", str(len(MAIN_OPTIONS))).run(pause=0)

    out = capsys.readouterr().out
    assert "Could not restore ollama-backup-20240101-000000" in out
    assert "Thanks for using Ollama Manager" in out
    assert fake_client.pulled == []


def test_restore_rejects_unsafe_archive(settings, fake_client, tmp_path):
    settings.backup_dir.mkdir(parents=True)
    evil = tmp_path / "evil.txt"
    evil.write_text("x")
    with tarfile.open(settings.backup_dir / "ollama-backup-20240101-000000.tar.gz", "w:gz") as tar:
        tar.add(evil, arcname="../evil.txt")

    assert make_menu(fake_client, "1").restore_backup() is False


def test_create_backup_failure_is_reported(settings, fake_client, monkeypatch, capsys):
    def disk_full(client):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(menu_module.backup, "create_backup", disk_full)
    assert make_menu(fake_client).create_backup() is None
    assert "Backup failed" in capsys.readouterr().out


def test_quick_start_order_and_log(settings, monkeypatch):
    client = FakeClient()
    steps = []
    monkeypatch.setattr(menu_module.installer, "check_dependencies", lambda input_fn: steps.append("deps"))
    monkeypatch.setattr(menu_module.installer, "check_or_install_ollama",
                        lambda c, input_fn: steps.append("ollama") or True)
    monkeypatch.setattr(menu_module.optimizer, "optimize_system",
                        lambda input_fn, monitor: steps.append("optimize"))

    menu = make_menu(client, "y", "y", ram_gb=8)
    monkeypatch.setattr(menu, "show_specs", lambda: steps.append("specs") or menu.monitor.get_stats())
    monkeypatch.setattr(menu, "ui_config", lambda: steps.append("ui"))

    menu.quick_start()

    assert steps == ["deps", "ollama", "specs", "ui", "optimize"]
    assert client.pulled == ["phi3", "gemma2"]
    assert settings.usage_log.read_text().splitlines()[-1].endswith("- Quick start completed")


def test_quick_start_declining_everything(settings, monkeypatch):
    client = FakeClient(binary_present=False, serving=False)
    monkeypatch.setattr(menu_module.installer, "check_dependencies", lambda input_fn: {})
    monkeypatch.setattr(menu_module.installer, "install_ollama", lambda c, input_fn: c.run_install_script())
    monkeypatch.setattr(menu_module.shutil, "which", lambda name: None)

    make_menu(client, "n", "n", "1", "n").quick_start()

    assert client.script_runs == 1
    assert client.start_calls == 1
    assert client.pulled == []
    assert "Quick start completed" in settings.usage_log.read_text()
