"""
Ollama Manager v2.0 - Resource Monitor
Detects OS, CPU, RAM, swap and GPU/VRAM, and samples live usage
"""

import os
import platform
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

import psutil

from .config import get_paths, MONITOR_INTERVAL

GB = 1024 ** 3


@dataclass
class GPUStats:
    name: str
    vram_gb: int
    backend: str  # nvidia, rocm, apple, generic


@dataclass
class CPUStats:
    cores: int
    threads_per_core: int
    arch: str


@dataclass
class RAMStats:
    total_gb: int
    available_gb: float
    percent: float
    swap_gb: int


@dataclass
class SystemStats:
    timestamp: datetime
    os: str
    gpu: Optional[GPUStats]
    cpu: CPUStats
    ram: RAMStats

    @property
    def vram_gb(self) -> int:
        return self.gpu.vram_gb if self.gpu else 0


@dataclass
class UsageSnapshot:
    timestamp: datetime
    cpu_percent: float
    ram_percent: float
    gpu_util_percent: Optional[float] = None
    gpu_mem_percent: Optional[float] = None
    processes: List[Dict] = field(default_factory=list)


def _run(cmd: List[str], timeout: int = 5) -> Optional[str]:
    """Run a probe command, returning stdout or None when it fails"""
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def _is_macos() -> bool:
    return platform.system() == "Darwin"


class ResourceMonitor:
    """Hardware detection for model recommendations"""

    def __init__(self, os_release: Path = Path("/etc/os-release")):
        self.os_release = os_release
        self._last_stats: Optional[SystemStats] = None

    def detect_os(self) -> str:
        """Distribution id, 'macos' or 'unknown'"""
        if self.os_release.exists():
            try:
                for line in self.os_release.read_text().splitlines():
                    if line.startswith("ID="):
                        return line.split("=", 1)[1].strip().strip('"')
            except OSError:
                pass
        if _is_macos():
            return "macos"
        return "unknown"

    def get_gpu_stats(self) -> Optional[GPUStats]:
        """Probe nvidia-smi, rocm-smi, system_profiler, lshw in that order"""
        gpu = None

        if shutil.which("nvidia-smi"):
            out = _run(["nvidia-smi", "--query-gpu=name,memory.total",
                        "--format=csv,noheader,nounits"])
            if out and out.strip():
                parts = [p.strip() for p in out.strip().split("\n")[0].split(",")]
                try:
                    vram = int(float(parts[1])) // 1024
                except (IndexError, ValueError):
                    vram = 0
                gpu = GPUStats(name=parts[0], vram_gb=vram, backend="nvidia")
        elif shutil.which("rocm-smi"):
            out = _run(["rocm-smi", "--showproductname", "--csv"])
            if out and out.strip():
                last = out.strip().split("\n")[-1].split(",")
                name = last[1].strip() if len(last) > 1 else last[0].strip()
                gpu = GPUStats(name=name, vram_gb=0, backend="rocm")
        elif _is_macos():
            out = _run(["system_profiler", "SPDisplaysDataType"], timeout=15)
            for line in (out or "").splitlines():
                if "Chipset Model:" in line:
                    gpu = GPUStats(name=line.split(":", 1)[1].strip(), vram_gb=0, backend="apple")
                    break
        elif shutil.which("lshw"):
            out = _run(["sudo", "-n", "lshw", "-C", "display"], timeout=10)
            name = "Integrated Graphics"
            for line in (out or "").splitlines():
                if "product" in line.lower():
                    name = line.split(":", 1)[1].strip() or name
                    break
            gpu = GPUStats(name=name, vram_gb=0, backend="generic")

        self._cache_vram(gpu.vram_gb if gpu else 0)
        return gpu

    def _cache_vram(self, vram_gb: int):
        try:
            get_paths().vram_cache.write_text(f"{vram_gb}\n")
        except OSError as e:
            print(f"⚠️  Could not cache VRAM size: {e}")

    def get_cached_vram(self) -> int:
        """VRAM from the last GPU probe, 0 when never probed"""
        path = get_paths().vram_cache
        try:
            return int(path.read_text().strip())
        except (OSError, ValueError):
            return 0

    def get_cpu_stats(self) -> CPUStats:
        cores = psutil.cpu_count(logical=True) or 1
        physical = psutil.cpu_count(logical=False) or cores
        return CPUStats(
            cores=cores,
            threads_per_core=max(1, cores // physical),
            arch=platform.machine() or "unknown",
        )

    def get_ram_stats(self) -> RAMStats:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        return RAMStats(
            total_gb=round(mem.total / GB),
            available_gb=mem.available / GB,
            percent=mem.percent,
            swap_gb=round(swap.total / GB),
        )

    def get_stats(self) -> SystemStats:
        """Full hardware profile"""
        stats = SystemStats(
            timestamp=datetime.now(),
            os=self.detect_os(),
            gpu=self.get_gpu_stats(),
            cpu=self.get_cpu_stats(),
            ram=self.get_ram_stats(),
        )
        self._last_stats = stats
        return stats

    def format_cpu(self, cpu: CPUStats) -> str:
        if _is_macos():
            return f"{cpu.cores} cores ({cpu.arch})"
        return f"{cpu.cores} cores, {cpu.threads_per_core} threads ({cpu.arch})"

    def format_gpu(self, gpu: Optional[GPUStats]) -> str:
        if gpu is None:
            return "No GPU detected"
        if gpu.backend == "nvidia":
            return f"{gpu.name} ({gpu.vram_gb}GB VRAM)"
        if gpu.backend == "rocm":
            return f"{gpu.name} (AMD ROCm)"
        if gpu.backend == "apple":
            return f"{gpu.name} (Apple Silicon)"
        return gpu.name

    def format_stats(self, stats: Optional[SystemStats] = None) -> str:
        """Hardware specification box"""
        stats = stats or self._last_stats or self.get_stats()

        lines = []
        lines.append("┌─ Hardware Specifications ─────────────────────────────────┐")
        lines.append(f"│ 🔧 CPU      : {self.format_cpu(stats.cpu)}")
        lines.append(f"│ 📦 RAM      : {stats.ram.total_gb} GB")
        lines.append(f"│ 🎮 GPU      : {self.format_gpu(stats.gpu)}")
        lines.append(f"│ ⚙️ OS       : {stats.os}")
        lines.append("└───────────────────────────────────────────────────────────┘")
        return "\n".join(lines)

    def get_ollama_processes(self, sample: float = 0.5) -> List[Dict]:
        """pid, cpu/mem percent and command line of every ollama process.

        Only processes whose executable is named ``ollama`` count, so this
        manager's own ``ollama-manager`` process is left out. CPU percent is
        measured over ``sample`` seconds; psutil's first reading is always 0.
        """
        own_pid = os.getpid()
        found = []
        for proc in psutil.process_iter(["pid", "name", "cmdline"]):
            info = proc.info
            if info["pid"] == own_pid or info.get("name") != "ollama":
                continue
            try:
                proc.cpu_percent(None)
            except psutil.Error:
                continue
            found.append(proc)

        if found and sample:
            time.sleep(sample)

        procs = []
        for proc in found:
            try:
                cpu = proc.cpu_percent(None)
                mem = proc.memory_percent()
            except psutil.Error:
                continue
            info = proc.info
            procs.append({
                "pid": info["pid"],
                "cpu_percent": round(cpu, 1),
                "mem_percent": round(mem, 1),
                "command": " ".join(info.get("cmdline") or []) or info["name"],
            })
        return procs

    def get_usage(self) -> UsageSnapshot:
        """Live CPU/RAM/GPU load"""
        snap = UsageSnapshot(
            timestamp=datetime.now(),
            cpu_percent=psutil.cpu_percent(interval=0.5),
            ram_percent=psutil.virtual_memory().percent,
        )

        if shutil.which("nvidia-smi"):
            out = _run(["nvidia-smi", "--query-gpu=utilization.gpu,memory.used,memory.total",
                        "--format=csv,noheader,nounits"])
            if out and out.strip():
                try:
                    util, used, total = [float(p) for p in out.strip().split("\n")[0].split(",")]
                    snap.gpu_util_percent = util
                    snap.gpu_mem_percent = round(used / total * 100, 1) if total else 0.0
                except ValueError:
                    pass

        snap.processes = self.get_ollama_processes()
        return snap

    def format_usage(self, snap: UsageSnapshot) -> str:
        lines = ["Model Performance Monitor", snap.timestamp.strftime("%c"), ""]
        lines.append(f"CPU Usage: {snap.cpu_percent:.1f}%")
        lines.append(f"RAM Usage: {snap.ram_percent:.1f}%")
        if snap.gpu_util_percent is not None:
            lines.append(f"GPU Usage: {snap.gpu_util_percent:.0f}%")
            lines.append(f"GPU Memory: {snap.gpu_mem_percent:.1f}%")
        lines.append("\nOllama Processes:")
        for p in snap.processes:
            lines.append(f"{p['pid']} {p['cpu_percent']} {p['mem_percent']} {p['command']}")
        return "\n".join(lines)

    def watch(
        self,
        callback: Callable[[UsageSnapshot], None],
        interval: float = MONITOR_INTERVAL,
        iterations: Optional[int] = None,
    ):
        """Sample usage until interrupted (or for a fixed number of rounds)"""
        count = 0
        while iterations is None or count < iterations:
            callback(self.get_usage())
            count += 1
            if iterations is None or count < iterations:
                time.sleep(interval)


# Global instance
_monitor: Optional[ResourceMonitor] = None

def get_monitor() -> ResourceMonitor:
    """Get global resource monitor instance"""
    global _monitor
    if _monitor is None:
        _monitor = ResourceMonitor()
    return _monitor


if __name__ == "__main__":
    monitor = get_monitor()
    print(monitor.format_stats())
