"""
Ollama Manager v2.0 - Configuration
Paths, defaults, tier tables and tunables
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

SCRIPT_VERSION = "2.0.0"


# Paths
@dataclass(frozen=True)
class AppPaths:
    config_dir: Path
    backup_dir: Path
    home: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"

    @property
    def models_db(self) -> Path:
        return self.config_dir / "models.json"

    @property
    def usage_log(self) -> Path:
        return self.config_dir / "usage.log"

    @property
    def vram_cache(self) -> Path:
        return self.config_dir / "vram_size"

    @property
    def ollama_dir(self) -> Path:
        return self.home / ".ollama"


def get_paths() -> AppPaths:
    """Resolve paths at call time so env overrides always apply"""
    home = Path.home()
    config_dir = os.environ.get("OLLAMA_MANAGER_HOME")
    backup_dir = os.environ.get("OLLAMA_MANAGER_BACKUPS")
    paths = AppPaths(
        config_dir=Path(config_dir) if config_dir else home / ".config" / "ollama-manager",
        backup_dir=Path(backup_dir) if backup_dir else home / ".ollama-backups",
        home=home,
    )
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    return paths


# Ollama settings
OLLAMA_HOST = os.environ.get("OLLAMA_HOST", "http://localhost:11434")
if not OLLAMA_HOST.startswith("http"):
    OLLAMA_HOST = f"http://{OLLAMA_HOST}"
OLLAMA_TIMEOUT = 10  # seconds, API health checks only
OLLAMA_PORT = 11434
INSTALL_SCRIPT_URL = "https://ollama.com/install.sh"
DOWNLOAD_PAGE_URL = "https://ollama.com/download"
LATEST_RELEASE_URL = "https://api.github.com/repos/ollama/ollama/releases/latest"

# Preferences written on first run
DEFAULT_SETTINGS = {
    "preferred_models": [],
    "auto_update": True,
    "last_used_model": "",
    "ui_mode": "cli",
    "gpu_optimization": True,
    "model_categories": {
        "coding": [],
        "chat": [],
        "creative": [],
    },
}

CATEGORIES = ["chat", "coding", "creative", "vision", "embedding"]
SUGGESTIONS_PER_CATEGORY = 5

# Performance rating: (min_ram_gb, min_vram_gb, label, icon), first match wins
PERFORMANCE_TIERS: List[Tuple[int, int, str, str]] = [
    (32, 8, "Excellent", "🔥"),
    (16, 4, "Very Good", "⭐"),
    (8, 0, "Good", "✅"),
    (0, 0, "Limited", "❌"),
]

# Quick start auto-install: (min_ram_gb, models), first match wins
RECOMMENDED_TIERS: List[Tuple[int, List[str]]] = [
    (32, ["llama3.1", "mistral", "codellama", "phi3"]),
    (16, ["llama3.1", "phi3", "codellama"]),
    (8, ["phi3", "gemma2"]),
    (0, ["tinydolphin", "orca-mini"]),
]

# Tooling
REQUIRED_TOOLS = ["curl", "jq", "git"]
OPTIONAL_TOOLS = ["fzf", "dialog", "htop", "nvidia-smi"]

# Package manager command per OS id
PACKAGE_MANAGERS: Dict[str, List[str]] = {
    "ubuntu": ["sudo", "apt", "install", "-y"],
    "debian": ["sudo", "apt", "install", "-y"],
    "arch": ["sudo", "pacman", "-S", "--needed"],
    "manjaro": ["sudo", "pacman", "-S", "--needed"],
    "fedora": ["sudo", "dnf", "install", "-y"],
    "centos": ["sudo", "yum", "install", "-y"],
    "rhel": ["sudo", "yum", "install", "-y"],
    "macos": ["brew", "install"],
}
LINUX_INSTALL_TARGETS = ["ubuntu", "debian", "fedora", "centos", "rhel", "arch", "manjaro"]

# Optimization thresholds
MIN_RECOMMENDED_RAM_GB = 16
MIN_RECOMMENDED_SWAP_GB = 8
SWAP_FILE = Path("/swapfile")
SWAP_SIZE_GB = 8
CPU_GOVERNOR_GLOB = "/sys/devices/system/cpu/cpu*/cpufreq/scaling_governor"
CPU0_GOVERNOR = Path("/sys/devices/system/cpu/cpu0/cpufreq/scaling_governor")

GPU_ENV = {
    "CUDA_VISIBLE_DEVICES": "0",
    "OLLAMA_GPU_OVERHEAD": "0.1",
    "OLLAMA_MAX_LOADED_MODELS": "3",
}

OLLAMA_ENV = {
    "OLLAMA_NUM_PARALLEL": "2",
    "OLLAMA_MAX_QUEUE": "10",
    "OLLAMA_KEEP_ALIVE": "5m",
}

# Benchmark
BENCHMARK_PROMPT = "Explain quantum computing in simple terms."

# Usage analytics
UNUSED_LOOKBACK_LINES = 100
ANALYTICS_TOP_N = 5

# Backup schedules (cron expressions)
BACKUP_SCHEDULES = {
    "Daily": "0 2 * * *",
    "Weekly": "0 2 * * 0",
    "Monthly": "0 2 1 * *",
}

# Live monitor
MONITOR_INTERVAL = 2.0
