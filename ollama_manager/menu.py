"""
Ollama Manager - Interactive Menu
One method per main-menu entry; every prompt goes through input_fn.
"""

import shutil
import subprocess
import tarfile
import time
from pathlib import Path
from typing import Callable, List, Optional

from .models.catalog import compatible_models, load_catalog, search_models
from .models.config import BENCHMARK_PROMPT, BACKUP_SCHEDULES, OLLAMA_PORT, get_paths
from .models.ollama_client import OllamaClient, get_client
from .models.resource_monitor import ResourceMonitor, SystemStats, get_monitor
from . import backup, bulk_ops, installer, optimizer, usage_log
from .recommender import performance_rating, recommended_models, suggest_by_category
from .settings import get_setting, init_settings, set_setting
from .ui import (
    InputFn, ask, confirm, human_size, multi_choice, parse_choice, parse_selection,
    print_error, print_header, print_info, print_success, print_warning,
)

HELP_TEXT = """\
╔═══════════════════════════════════════════════════════════╗
║                   OLLAMA MANAGER                          ║
║                  Advanced Features Guide                  ║
╚═══════════════════════════════════════════════════════════╝

🚀 QUICK START
  • Automatically detects your system capabilities
  • Installs Ollama and recommended models
  • Applies performance optimizations
  • Sets up preferred UI mode

🧠 SMART FEATURES
  • GPU/RAM-based model recommendations
  • Automatic performance optimization
  • Usage analytics and model switching
  • Backup and restore functionality

🎨 UI MODES
  • CLI: Traditional command-line interface
  • TUI: Enhanced interface with fzf
  • Dialog: Full-screen dialog interface

📊 MONITORING
  • Real-time resource monitoring
  • Model performance benchmarking
  • Usage tracking and analytics

🛠️ AUTOMATION
  • Automatic updates
  • Scheduled backups
  • Bulk model operations
  • System optimization

⚙️ CONFIGURATION
  All settings stored in: ~/.config/ollama-manager/
  (override with OLLAMA_MANAGER_HOME)
  • config.json: User preferences
  • usage.log: Activity tracking
  • models.json: Model database

🔧 COMMAND LINE OPTIONS
  --auto-backup    : Create automatic backup
  --quick-setup    : Run quick start setup
  --monitor        : Start system monitoring
  --optimize       : Apply system optimizations
  --version        : Show version

  Subcommands: status, specs, recommend, install, run, search,
               analytics, backup, settings

🆘 TROUBLESHOOTING
  • Check logs: ~/.config/ollama-manager/usage.log
  • Reset config: ollama-manager settings --reset
  • GPU issues: Run system optimization
  • Model errors: Try bulk update operation

🌐 RESOURCES
  • Ollama: https://ollama.com
  • Models: https://ollama.com/library
"""

MAIN_OPTIONS = [
    "🚀 Quick Start (Install & Setup)",
    "🧠 Smart Model Installer",
    "🔄 Model Switcher",
    "📊 System Analysis",
    "⚙️  System Optimization",
    "🔍 Search Models",
    "📈 Performance Test",
    "🛠️  Bulk Operations",
    "💾 Backup & Restore",
    "📊 Usage Analytics",
    "🎨 UI Configuration",
    "🖥️  System Monitor",
    "❓ Help & Documentation",
    "🚪 Exit",
]

INSTALL_CATEGORIES = ["All", "Chat", "Coding", "Creative", "Vision", "Embedding"]
BULK_OPERATIONS = ["Update All", "Remove Unused", "Export List", "Import List", "Clear Cache"]
BACKUP_OPERATIONS = ["Create Backup", "Restore from Backup", "Schedule Auto-Backup", "View Backups"]
MONITOR_OPTIONS = ["Resource Usage", "GPU Monitoring", "Ollama Processes", "Model Performance"]


class ManagerMenu:
    """Interactive menu screens"""

    def __init__(
        self,
        client: Optional[OllamaClient] = None,
        monitor: Optional[ResourceMonitor] = None,
        input_fn: InputFn = input,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client or get_client()
        self.monitor = monitor or get_monitor()
        self.input = input_fn
        self.clock = clock

    # System analysis

    def show_specs(self) -> SystemStats:
        print_header("⚙️ System Analysis & Compatibility Check")
        stats = self.monitor.get_stats()
        print(self.monitor.format_stats(stats))
        rating = performance_rating(stats.ram.total_gb, stats.vram_gb)
        print(f"\nAI Performance Rating: {rating}\n")
        return stats

    def suggest_models(self, ram_gb: Optional[int] = None):
        print_header("🧠 Intelligent Model Recommendations")
        if ram_gb is None:
            ram_gb = self.monitor.get_ram_stats().total_gb
        vram_gb = self.monitor.get_cached_vram()
        models = load_catalog()
        suggestions = suggest_by_category(ram_gb, self.client.list_models(), models=models)

        print(f"Based on your system specs ({ram_gb}GB RAM, {vram_gb}GB VRAM):\n")
        for category, items in suggestions.items():
            print(f"{category.capitalize()} Models:")
            if not items:
                print("  No compatible models found for this category")
            for s in items:
                print(f"  • {s.model.name} ({s.model.size}) {s.status}")
                print(f"    {s.model.description}")
            print()
        return suggestions

    def system_analysis(self):
        stats = self.show_specs()
        self.suggest_models(stats.ram.total_gb)

    # Installation

    def model_installer(self) -> List[str]:
        print_header("📥 Interactive Model Installer")
        models = load_catalog()

        selected = multi_choice("Select category:", INSTALL_CATEGORIES, self.input)
        if selected is None:
            print_error("Invalid selection")
            return []
        category = None if selected == 0 else INSTALL_CATEGORIES[selected].lower()

        ram_gb = self.monitor.get_ram_stats().total_gb
        choices = compatible_models(ram_gb, category, models)
        if not choices:
            print_warning("No compatible models found")
            return []

        print("\nAvailable models for installation:")
        for i, m in enumerate(choices, 1):
            print(f"[{i}] {m.name} ({m.size}, {m.ram_req}GB RAM)")
            print(f"    {m.description}")

        raw = ask("\nEnter model numbers to install (space-separated, or 'all'): ", self.input)
        picked = [choices[i].name for i in parse_selection(raw, len(choices))]
        for name in picked:
            installer.install_model(name, self.client)
        return picked

    # Switching

    def model_switcher(self) -> Optional[str]:
        print_header("🔄 Smart Model Switcher")
        installed = self.client.list_models()
        if not installed:
            print_warning("No models installed. Install some models first.")
            return None

        if get_setting("ui_mode") == "tui" and shutil.which("fzf"):
            return self._fzf_switcher(installed)

        last_used = get_setting("last_used_model")
        print("Installed Models:")
        for i, model in enumerate(installed, 1):
            tag = " [LAST USED]" if model == last_used else ""
            print(f"[{i}] {model}{tag}")
            info = self.client.model_summary(model)
            if info:
                print(f"    {info}")

        choice = parse_choice(ask(f"\nSelect model to run [1-{len(installed)}]: ", self.input), len(installed))
        if choice is None:
            print_error("Invalid selection")
            return None

        model = installed[choice]
        self._start_model(model, "Switched to model")
        return model

    def _fzf_switcher(self, installed: List[str]) -> Optional[str]:
        binary = self.client.binary
        try:
            result = subprocess.run(
                ["fzf", "--prompt=Select model: ", "--height=40%", "--border",
                 f"--preview=echo 'Model: {{}}' && {binary} show {{}} 2>/dev/null | head -20"],
                input="\n".join(installed) + "\n",
                stdout=subprocess.PIPE,
                text=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            print_error(f"fzf failed: {e}")
            return None

        model = result.stdout.strip()
        if not model:
            return None
        self._start_model(model, "Switched to model (fzf)")
        return model

    def _start_model(self, model: str, log_prefix: str):
        set_setting("last_used_model", model)
        usage_log.log_usage(f"{log_prefix}: {model}")
        print_success(f"Starting {model}...")
        print("Type '/bye' to exit the model chat\n")
        self.client.run_model(model)

    # Search

    def search(self, term: Optional[str] = None):
        print_header("🧠 Model Search & Discovery")
        if term is None:
            term = ask("Enter search term (name, category, or description): ", self.input)
        if not term:
            print_error("Please enter a search term")
            return []

        results = search_models(term, load_catalog())
        installed = set(self.client.list_models())
        print(f"\nSearch Results for '{term}':\n")
        for m in results:
            status = "[INSTALLED]" if m.name in installed else "[AVAILABLE]"
            print(f"{m.name} ({m.size}, {m.ram_req}GB RAM) {status}")
            print(f"  Category: {m.category}")
            print(f"  {m.description}")
            print()
        if not results:
            print_warning(f"No models found matching '{term}'")
        return results

    # Benchmarks

    def performance_test(self):
        print_header("🔥 Model Performance Testing")
        installed = self.client.list_models()
        if not installed:
            print_warning("No models installed for testing.")
            return {}

        print("Select models to test:")
        for i, model in enumerate(installed, 1):
            print(f"[{i}] {model}")
        raw = ask("\nEnter model numbers (space-separated): ", self.input)

        timings = {}
        for idx in parse_selection(raw, len(installed)):
            model = installed[idx]
            print(f"\nTesting {model}...")
            start = self.clock()
            self.client.prompt_model(model, BENCHMARK_PROMPT)
            duration = int(self.clock() - start)
            timings[model] = duration
            print(f"{model}: {duration}s response time")
            usage_log.log_usage(f"Performance test: {model} - {duration}s")
        return timings

    # Bulk

    def bulk_operations(self):
        print_header("⚙️ Bulk Model Operations")
        selected = multi_choice("Select operation:", BULK_OPERATIONS, self.input)

        if selected == 0:
            print_info("Updating all installed models...")
            bulk_ops.update_all(
                self.client,
                on_model=lambda m, ok: print_success(f"{m} updated") if ok else print_error(f"{m} update failed"),
            )
        elif selected == 1:
            print_info("Finding unused models...")
            unused = bulk_ops.find_unused(self.client)
            if unused is None:
                print_warning("No usage data available")
                return
            print("Models that haven't been used recently:")
            for model in unused:
                print(f"  • {model}")
                if confirm(f"Remove {model}?", self.input):
                    if self.client.remove_model(model):
                        print_success(f"Removed {model}")
                    else:
                        print_error(f"Could not remove {model}")
        elif selected == 2:
            export_file = bulk_ops.export_list(self.client)
            print_success(f"Model list exported to {export_file}")
        elif selected == 3:
            raw = ask("Enter path to model list file: ", self.input)
            try:
                models = bulk_ops.read_import_list(Path(raw).expanduser())
            except FileNotFoundError as e:
                print_error(str(e))
                return
            installer.install_models(models, self.client)
        elif selected == 4:
            if confirm("Clear Ollama cache and temporary files?", self.input):
                removed = bulk_ops.clear_cache()
                if removed["tmp_files"]:
                    print_success("Cleared temporary files")
                print_success("Cleared application cache")
        else:
            print_error("Invalid selection")

    # Backups

    def backup_restore(self):
        print_header("⚙️ Backup & Restore")
        selected = multi_choice("Select operation:", BACKUP_OPERATIONS, self.input)
        if selected == 0:
            self.create_backup()
        elif selected == 1:
            self.restore_backup()
        elif selected == 2:
            self.schedule_backup()
        elif selected == 3:
            self.list_backups()
        else:
            print_error("Invalid selection")

    def create_backup(self) -> Optional[Path]:
        print_info("Creating backup...")
        try:
            archive = backup.create_backup(self.client)
        except (shutil.Error, tarfile.TarError, OSError) as e:
            print_error(f"Backup failed: {e}")
            return None
        print_success(f"Backup created: {archive}")
        return archive

    def restore_backup(self) -> bool:
        if not get_paths().backup_dir.is_dir():
            print_error("No backups directory found")
            return False
        backups = backup.list_backups()
        if not backups:
            print_error("No backups found")
            return False

        print("Available backups:")
        for i, b in enumerate(backups, 1):
            print(f"[{i}] {b.name}")
        choice = parse_choice(ask(f"\nSelect backup to restore [1-{len(backups)}]: ", self.input), len(backups))
        if choice is None:
            print_error("Invalid selection")
            return False

        chosen = backups[choice]
        try:
            manifest = backup.read_manifest(chosen.path)
            if manifest:
                print(f"  Created {manifest.get('created', '?')} on {manifest.get('hostname', '?')}, "
                      f"{len(manifest.get('models', []))} models")
            print_info("Extracting backup...")
            backup.restore_backup(chosen.path, lambda m: installer.install_model(m, self.client))
        except (tarfile.TarError, ValueError, OSError) as e:
            print_error(f"Could not restore {chosen.name}: {e}")
            return False
        print_success("Backup restored successfully")
        return True

    def list_backups(self):
        if not get_paths().backup_dir.is_dir():
            print_error("No backups directory found")
            return []
        backups = backup.list_backups()
        print("Backup History:\n")
        for b in backups:
            print(b.name)
            print(f"  Size: {human_size(b.size_bytes)}")
            print(f"  Date: {b.modified.strftime('%Y-%m-%d %H:%M:%S')}")
            print()
        return backups

    def schedule_backup(self) -> bool:
        print_info("Auto-backup scheduling (requires cron)")
        if shutil.which("crontab") is None:
            print_error("Crontab not available. Please install cron.")
            return False

        frequencies = list(BACKUP_SCHEDULES) + ["Disable"]
        selected = multi_choice("Select backup frequency:", frequencies, self.input)
        if selected is None:
            print_error("Invalid selection")
            return False

        frequency = frequencies[selected]
        if not backup.schedule_backup(frequency):
            print_error("Could not update crontab")
            return False
        if frequency == "Disable":
            print_success("Auto-backup disabled")
        else:
            print_success(f"Auto-backup scheduled: {frequency}")
        return True

    # Analytics

    def usage_analytics(self):
        print_header("⭐ Usage Analytics")
        if not usage_log.has_log():
            print_warning("No usage data available yet")
            return None

        print("Recent Activity Summary:\n")
        print("Most Used Models:")
        for model, count in usage_log.most_used_models():
            print(f"  {model}: {count} times")

        print("\nRecent Installations:")
        for when, model in usage_log.recent_installs():
            print(f"  {model} ({when})")

        stats = usage_log.get_stats()
        print("\nStatistics:")
        print(f"  Model switches: {stats['switches']}")
        print(f"  Models installed: {stats['installs']}")
        print(f"  Updates performed: {stats['updates']}")
        return stats

    # UI mode

    def available_ui_modes(self):
        modes = [("cli", "CLI Mode")]
        if shutil.which("fzf"):
            modes.append(("tui", "TUI Mode"))
        if shutil.which("dialog"):
            modes.append(("dialog", "Dialog Mode"))
        return modes

    def ui_config(self) -> Optional[str]:
        print_header("✨ UI Mode Configuration")
        modes = self.available_ui_modes()
        detected = {
            "tui": "fzf detected - TUI mode available",
            "dialog": "dialog detected - Enhanced TUI available",
        }
        for mode, _ in modes[1:]:
            print_success(detected[mode])

        if len(modes) == 1 and confirm("Install fzf and dialog for enhanced UI modes?", self.input):
            installer.install_packages(["fzf", "dialog"])
            modes = self.available_ui_modes()

        print("\nAvailable UI modes:")
        for i, (_, label) in enumerate(modes, 1):
            print(f"[{i}] {label}{' (default)' if i == 1 else ''}")

        choice = parse_choice(ask(f"\nSelect UI mode [1-{len(modes)}]: ", self.input), len(modes))
        if choice is None:
            return None
        mode, label = modes[choice]
        set_setting("ui_mode", mode)
        print_success(f"UI mode set to: {label}")
        usage_log.log_usage(f"UI mode changed to: {mode}")
        return mode

    # Monitoring

    def system_monitor(self):
        print_header("🔥 Real-time System Monitoring")
        if shutil.which("htop") is None:
            print_warning("htop not found. Install for better monitoring.")
            if confirm("Install htop?", self.input):
                installer.install_packages(["htop"])

        selected = multi_choice("Select monitoring type:", MONITOR_OPTIONS, self.input)
        if selected == 0:
            subprocess.call(["htop"] if shutil.which("htop") else ["top"])
        elif selected == 1:
            if shutil.which("nvidia-smi"):
                subprocess.call(["watch", "-n", "1", "nvidia-smi"])
            else:
                print_error("nvidia-smi not available")
        elif selected == 2:
            self.show_ollama_processes()
        elif selected == 3:
            self.monitor_performance()
        else:
            print_error("Invalid selection")

    def show_ollama_processes(self):
        print("Ollama Processes:")
        for p in self.monitor.get_ollama_processes():
            print(f"  {p['pid']} {p['cpu_percent']}% {p['mem_percent']}% {p['command']}")
        print("\nListening on:")
        if shutil.which("lsof"):
            subprocess.call(["lsof", "-i", f":{OLLAMA_PORT}"])
        else:
            print(f"  {self.client.host} ({'up' if self.client.is_available() else 'down'})")

    def monitor_performance(self, iterations: Optional[int] = None):
        print_info("Model performance monitoring (press Ctrl+C to stop)")

        def render(snap):
            print("\033[2J\033[H", end="")
            print(self.monitor.format_usage(snap))

        try:
            self.monitor.watch(render, iterations=iterations)
        except KeyboardInterrupt:
            print()

    # Setup

    def quick_start(self):
        print_header("🚀 Quick Start Setup")
        print_info("Running complete setup and optimization...")

        init_settings()
        installer.check_dependencies(self.input)
        installer.check_or_install_ollama(self.client, self.input)
        stats = self.show_specs()

        if confirm("Auto-install recommended models for your system?", self.input):
            installer.install_models(recommended_models(stats.ram.total_gb), self.client)

        self.ui_config()

        if confirm("Apply system optimizations?", self.input):
            optimizer.optimize_system(self.input, self.monitor)

        print_success("Quick start complete! Your system is ready for AI.")
        usage_log.log_usage("Quick start completed")

    def show_help(self, pause: bool = True):
        print_header("✨ Help & Documentation")
        print(HELP_TEXT)
        if pause:
            ask("Press Enter to continue...", self.input)

    # Main loop

    def dispatch(self, choice: Optional[int]) -> bool:
        """Run one menu entry; False means exit"""
        actions = [
            self.quick_start,
            self.model_installer,
            self.model_switcher,
            self.system_analysis,
            lambda: optimizer.optimize_system(self.input, self.monitor),
            self.search,
            self.performance_test,
            self.bulk_operations,
            self.backup_restore,
            self.usage_analytics,
            self.ui_config,
            self.system_monitor,
            self.show_help,
        ]
        if choice == len(actions):
            print_success("Thanks for using Ollama Manager! 🦙")
            return False
        if choice is None or choice > len(actions):
            print_error("Invalid selection")
            return True
        actions[choice]()
        return True

    def run(self, pause: float = 1.0):
        while True:
            print("Options: ")
            for i, option in enumerate(MAIN_OPTIONS, 1):
                print(f"[{i}] {option}")
            try:
                raw = self.input(f"\nSelect option [1-{len(MAIN_OPTIONS)}]: ")
            except EOFError:
                return
            if not self.dispatch(parse_choice(raw, len(MAIN_OPTIONS))):
                return
            print()
            if pause:
                time.sleep(pause)
