"""
Ollama Manager Optimizer
Swap, CPU governor, and GPU/ollama environment tuning for AI workloads.
"""

import glob
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .models.config import (
    CPU0_GOVERNOR, CPU_GOVERNOR_GLOB, GPU_ENV, MIN_RECOMMENDED_RAM_GB, MIN_RECOMMENDED_SWAP_GB,
    OLLAMA_ENV, SWAP_FILE, SWAP_SIZE_GB,
)
from .models.resource_monitor import ResourceMonitor, get_monitor
from .ui import InputFn, confirm, print_error, print_header, print_info, print_success, print_warning


@dataclass
class OptimizationReport:
    ram_gb: int
    vram_gb: int
    swap_gb: int
    governor: Optional[str]
    low_ram: bool = False
    low_swap: bool = False
    has_gpu: bool = False
    notes: List[str] = field(default_factory=list)


def shell_profile(home: Optional[Path] = None) -> Path:
    """~/.zshrc when present, otherwise ~/.bashrc"""
    home = home or Path.home()
    zshrc = home / ".zshrc"
    return zshrc if zshrc.exists() else home / ".bashrc"


def read_governor(path: Path = CPU0_GOVERNOR) -> Optional[str]:
    try:
        return path.read_text().strip()
    except OSError:
        return None


def analyze(monitor: Optional[ResourceMonitor] = None, governor_path: Path = CPU0_GOVERNOR) -> OptimizationReport:
    monitor = monitor or get_monitor()
    ram = monitor.get_ram_stats()
    vram = monitor.get_cached_vram()

    report = OptimizationReport(
        ram_gb=ram.total_gb,
        vram_gb=vram,
        swap_gb=ram.swap_gb,
        governor=read_governor(governor_path),
    )
    report.low_ram = ram.total_gb < MIN_RECOMMENDED_RAM_GB
    report.low_swap = report.low_ram and ram.swap_gb < MIN_RECOMMENDED_SWAP_GB
    report.has_gpu = vram > 0

    if report.low_ram:
        report.notes.append(f"Consider upgrading to {MIN_RECOMMENDED_RAM_GB}GB+ RAM for better model performance")
    if report.low_swap:
        report.notes.append(
            f"Current swap: {ram.swap_gb}GB - consider increasing to {MIN_RECOMMENDED_SWAP_GB}GB+"
        )
    if report.governor and report.governor != "performance":
        report.notes.append(f"CPU governor is '{report.governor}', not 'performance'")
    return report


def export_lines(env: Dict[str, str], header: str) -> List[str]:
    return ["", f"# {header}"] + [f"export {k}={v}" for k, v in env.items()]


def append_exports(env: Dict[str, str], header: str, profile: Optional[Path] = None) -> Path:
    """Append export lines to the shell profile"""
    profile = profile or shell_profile()
    with open(profile, "a") as f:
        f.write("\n".join(export_lines(env, header)) + "\n")
    return profile


def apply_env(env: Dict[str, str]):
    """Apply to this process, so child ollama processes inherit it"""
    os.environ.update(env)


def create_swap_file(swap_file: Path = SWAP_FILE, size_gb: int = SWAP_SIZE_GB,
                     fstab: Path = Path("/etc/fstab")) -> bool:
    print_info(f"Creating {size_gb}GB swap file...")

    if os.geteuid() != 0:
        print_error("Root privileges required for swap creation")
        return False

    try:
        result = subprocess.run(["fallocate", "-l", f"{size_gb}G", str(swap_file)])
        if result.returncode != 0:
            subprocess.run(
                ["dd", "if=/dev/zero", f"of={swap_file}", "bs=1G", f"count={size_gb}"],
                check=True,
            )
        swap_file.chmod(0o600)
        subprocess.run(["mkswap", str(swap_file)], check=True)
        subprocess.run(["swapon", str(swap_file)], check=True)
    except (OSError, subprocess.SubprocessError) as e:
        print_error(f"Swap creation failed: {e}")
        return False

    entry = f"{swap_file} none swap sw 0 0"
    existing = fstab.read_text() if fstab.exists() else ""
    if str(swap_file) not in existing:
        with open(fstab, "a") as f:
            f.write(entry + "\n")

    print_success(f"{size_gb}GB swap file created and activated")
    return True


def set_performance_governor() -> bool:
    targets = glob.glob(CPU_GOVERNOR_GLOB)
    if not targets:
        return False
    try:
        subprocess.run(
            ["sudo", "tee", *targets],
            input="performance\n", text=True, stdout=subprocess.DEVNULL, check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        print_error(f"Could not set CPU governor: {e}")
        return False
    print_success("CPU governor set to performance")
    return True


def optimize_gpu_settings(input_fn: InputFn = input, profile: Optional[Path] = None) -> bool:
    """Apply GPU env vars; optionally persist them. True when persisted."""
    print_info("Applying GPU optimizations...")
    apply_env(GPU_ENV)
    print_success("GPU optimization settings applied")

    profile = profile or shell_profile()
    if confirm(f"Save GPU optimizations to {profile}?", input_fn):
        append_exports(GPU_ENV, "Ollama GPU Optimizations", profile)
        print_success(f"Optimizations saved to {profile}")
        return True
    return False


def apply_ollama_optimizations(profile: Optional[Path] = None) -> Path:
    apply_env(OLLAMA_ENV)
    profile = append_exports(OLLAMA_ENV, "Ollama Performance Optimizations", profile)
    print_success("Ollama optimizations applied and saved")
    return profile


def optimize_system(input_fn: InputFn = input, monitor: Optional[ResourceMonitor] = None):
    """Interactive optimization walkthrough"""
    print_header("⚙️ System Optimization for AI Workloads")
    print("Analyzing system for AI optimization opportunities...\n")

    report = analyze(monitor)
    print("Optimization Recommendations:\n")

    if report.low_ram:
        print_warning(report.notes[0])
        if report.low_swap:
            print(f"  • Current swap: {report.swap_gb}GB - consider increasing to {MIN_RECOMMENDED_SWAP_GB}GB+")
            if confirm("Create/increase swap file?", input_fn):
                create_swap_file()
    else:
        print_success("RAM: Adequate for most models")

    if report.has_gpu:
        print_success("GPU: CUDA detected, models can use GPU acceleration")
        if confirm("Optimize GPU memory settings?", input_fn):
            optimize_gpu_settings(input_fn)
    else:
        print_info("GPU: Using CPU inference (consider GPU for faster performance)")

    print("\nSystem Tuning:")
    if report.governor is not None:
        print(f"  Current CPU governor: {report.governor}")
        if report.governor != "performance" and confirm("Set CPU governor to performance mode?", input_fn):
            set_performance_governor()

    print("\nOllama Optimizations:")
    if confirm("Apply Ollama performance optimizations?", input_fn):
        apply_ollama_optimizations()

    return report
