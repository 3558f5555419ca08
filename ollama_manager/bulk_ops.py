"""
Ollama Manager Bulk Operations
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .models.config import AppPaths, get_paths
from .models.ollama_client import OllamaClient, get_client
from .usage_log import has_log, unused_models


def update_all(client: Optional[OllamaClient] = None,
               on_model: Optional[Callable[[str, bool], None]] = None) -> Dict[str, bool]:
    """Re-pull every installed model"""
    client = client or get_client()
    results = {}
    for model in client.list_models():
        results[model] = client.pull_model(model, progress_callback=lambda line: None)
        if on_model:
            on_model(model, results[model])
    return results


def find_unused(client: Optional[OllamaClient] = None) -> Optional[List[str]]:
    """Installed models not switched to recently; None without a usage log"""
    if not has_log():
        return None
    client = client or get_client()
    return unused_models(client.list_models())


def export_list(client: Optional[OllamaClient] = None, paths: Optional[AppPaths] = None,
                today: Optional[datetime] = None) -> Path:
    client = client or get_client()
    paths = paths or get_paths()
    today = today or datetime.now()
    export_file = paths.home / f"ollama-models-{today.strftime('%Y%m%d')}.txt"
    export_file.write_text("".join(f"{m}\n" for m in client.list_models()))
    return export_file


def read_import_list(import_file: Path) -> List[str]:
    """Model names from a list file, blanks skipped"""
    if not import_file.is_file():
        raise FileNotFoundError(f"File not found: {import_file}")
    return [line.strip() for line in import_file.read_text().splitlines() if line.strip()]


def clear_cache(paths: Optional[AppPaths] = None) -> Dict[str, int]:
    """Delete ~/.ollama/**/*.tmp and the manager's cached files"""
    paths = paths or get_paths()
    removed = {"tmp_files": 0, "cache_files": 0}

    if paths.ollama_dir.is_dir():
        for tmp in paths.ollama_dir.rglob("*.tmp"):
            try:
                tmp.unlink()
                removed["tmp_files"] += 1
            except OSError:
                continue

    for cached in (paths.models_db, paths.vram_cache):
        if cached.exists():
            cached.unlink()
            removed["cache_files"] += 1
    return removed
