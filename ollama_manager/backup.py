"""
Ollama Manager Backups
tar.gz snapshots of the model list, manager config and ~/.ollama config,
plus cron scheduling for unattended runs.
"""

import json
import shutil
import socket
import subprocess
import sys
import tarfile
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .models.config import SCRIPT_VERSION, BACKUP_SCHEDULES, AppPaths, get_paths
from .models.ollama_client import OllamaClient, get_client
from .usage_log import log_usage

AUTO_BACKUP_FLAG = "--auto-backup"


@dataclass
class BackupInfo:
    name: str
    path: Path
    size_bytes: int
    modified: datetime


def _ignore_blobs(directory: str, names: List[str]) -> List[str]:
    # Model blobs are re-pulled from models.txt on restore
    return ["models"] if Path(directory).name == ".ollama" else []


def create_backup(
    client: Optional[OllamaClient] = None,
    paths: Optional[AppPaths] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Write ollama-backup-YYYYMMDD-HHMMSS.tar.gz and return its path"""
    client = client or get_client()
    paths = paths or get_paths()
    now = now or datetime.now()

    name = f"ollama-backup-{now.strftime('%Y%m%d-%H%M%S')}"
    paths.backup_dir.mkdir(parents=True, exist_ok=True)
    archive = paths.backup_dir / f"{name}.tar.gz"

    models = client.list_models()

    with tempfile.TemporaryDirectory(prefix="ollama-backup-") as tmp:
        staging = Path(tmp) / name
        staging.mkdir()

        (staging / "models.txt").write_text("".join(f"{m}\n" for m in models))

        if paths.config_dir.exists():
            shutil.copytree(paths.config_dir, staging / "config")
        if paths.ollama_dir.is_dir():
            shutil.copytree(paths.ollama_dir, staging / "ollama-config",
                            ignore=_ignore_blobs, symlinks=True)

        manifest = {
            "created": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "hostname": socket.gethostname(),
            "models": models,
            "version": SCRIPT_VERSION,
        }
        (staging / "manifest.json").write_text(json.dumps(manifest, indent=4))

        with tarfile.open(archive, "w:gz") as tar:
            tar.add(staging, arcname=name)

    log_usage(f"Backup created: {name}")
    return archive


def list_backups(paths: Optional[AppPaths] = None) -> List[BackupInfo]:
    paths = paths or get_paths()
    if not paths.backup_dir.is_dir():
        return []

    backups = []
    for archive in sorted(paths.backup_dir.glob("*.tar.gz")):
        stat = archive.stat()
        backups.append(BackupInfo(
            name=archive.name[: -len(".tar.gz")],
            path=archive,
            size_bytes=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime),
        ))
    return backups


def read_manifest(archive: Path) -> dict:
    name = archive.name[: -len(".tar.gz")]
    with tarfile.open(archive, "r:gz") as tar:
        try:
            member = tar.extractfile(f"{name}/manifest.json")
        except KeyError:
            return {}
        if member is None:
            return {}
        return json.load(member)


def _safe_extract(tar: tarfile.TarFile, dest: Path):
    dest = dest.resolve()
    for member in tar.getmembers():
        target = (dest / member.name).resolve()
        if dest != target and dest not in target.parents:
            raise ValueError(f"Unsafe path in backup: {member.name}")
    if hasattr(tarfile, "data_filter"):
        tar.extractall(dest, filter="data")
    else:
        tar.extractall(dest)


def restore_backup(
    archive: Path,
    install_fn: Callable[[str], bool],
    paths: Optional[AppPaths] = None,
) -> List[str]:
    """Reinstall listed models and copy config back; returns the models"""
    paths = paths or get_paths()
    name = archive.name[: -len(".tar.gz")]
    models: List[str] = []

    with tempfile.TemporaryDirectory(prefix="ollama-restore-") as tmp:
        with tarfile.open(archive, "r:gz") as tar:
            _safe_extract(tar, Path(tmp))
        backup_path = Path(tmp) / name

        models_file = backup_path / "models.txt"
        if models_file.exists():
            print("ℹ️  Restoring models...")
            models = [m.strip() for m in models_file.read_text().splitlines() if m.strip()]
            for model in models:
                install_fn(model)

        config_dir = backup_path / "config"
        if config_dir.is_dir():
            print("ℹ️  Restoring configuration...")
            shutil.copytree(config_dir, paths.config_dir, dirs_exist_ok=True)

    log_usage(f"Backup restored: {name}")
    return models


# Scheduling

def program_command() -> str:
    """Command cron should run for an unattended backup"""
    exe = shutil.which("ollama-manager")
    if exe:
        return exe
    return f"{sys.executable} -m ollama_manager.manager_cli"


def _read_crontab() -> List[str]:
    try:
        result = subprocess.run(["crontab", "-l"], capture_output=True, text=True)
    except (OSError, subprocess.SubprocessError):
        return []
    if result.returncode != 0:
        return []
    return result.stdout.splitlines()


def _write_crontab(lines: List[str]) -> bool:
    content = "\n".join(lines) + "\n" if lines else ""
    try:
        result = subprocess.run(["crontab", "-"], input=content, text=True)
    except (OSError, subprocess.SubprocessError) as e:
        print(f"❌ Could not update crontab: {e}")
        return False
    return result.returncode == 0


def cron_entry(frequency: str, command: Optional[str] = None) -> str:
    schedule = BACKUP_SCHEDULES[frequency]
    return f"{schedule} {command or program_command()} {AUTO_BACKUP_FLAG}"


def schedule_backup(frequency: str, command: Optional[str] = None) -> bool:
    """Install (or with 'Disable', remove) the auto-backup cron entry"""
    if shutil.which("crontab") is None:
        print("❌ Crontab not available. Please install cron.")
        return False

    lines = [line for line in _read_crontab() if AUTO_BACKUP_FLAG not in line]
    if frequency != "Disable":
        if frequency not in BACKUP_SCHEDULES:
            print(f"❌ Unknown backup frequency: {frequency}")
            return False
        lines.append(cron_entry(frequency, command))
    return _write_crontab(lines)
