"""
Ollama Manager Usage Log
Append-only activity log and the analytics read back from it.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .models.config import get_paths, ANALYTICS_TOP_N, UNUSED_LOOKBACK_LINES

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SWITCHED = "Switched to model"
INSTALLING = "Installing model"
UPDATED = "updated to"


@dataclass
class UsageEntry:
    timestamp: str
    message: str

    @property
    def last_word(self) -> str:
        parts = self.message.split()
        return parts[-1] if parts else ""


def _log_file(path: Optional[Path] = None) -> Path:
    return path or get_paths().usage_log


def log_usage(message: str, path: Optional[Path] = None):
    """Append a timestamped line"""
    path = _log_file(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a") as f:
            f.write(f"{datetime.now().strftime(TIMESTAMP_FORMAT)} - {message}\n")
    except OSError as e:
        print(f"⚠️  Could not write usage log: {e}")


def has_log(path: Optional[Path] = None) -> bool:
    return _log_file(path).exists()


def read_entries(path: Optional[Path] = None, tail: Optional[int] = None) -> List[UsageEntry]:
    path = _log_file(path)
    if not path.exists():
        return []
    with open(path) as f:
        lines = [line.rstrip("\n") for line in f if line.strip()]
    if tail is not None:
        lines = lines[-tail:]

    entries = []
    for line in lines:
        timestamp, sep, message = line.partition(" - ")
        if not sep:
            timestamp, message = "", line
        entries.append(UsageEntry(timestamp=timestamp, message=message))
    return entries


def most_used_models(path: Optional[Path] = None, limit: int = ANALYTICS_TOP_N) -> List[Tuple[str, int]]:
    counts = Counter(e.last_word for e in read_entries(path) if SWITCHED in e.message)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]


def recent_installs(path: Optional[Path] = None, limit: int = ANALYTICS_TOP_N) -> List[Tuple[str, str]]:
    """(timestamp, model) of the latest installs, oldest first"""
    installs = [e for e in read_entries(path) if INSTALLING in e.message]
    return [(e.timestamp, e.message.split(": ", 1)[-1]) for e in installs[-limit:]]


def get_stats(path: Optional[Path] = None) -> Dict[str, int]:
    entries = read_entries(path)
    return {
        "switches": sum(1 for e in entries if SWITCHED in e.message),
        "installs": sum(1 for e in entries if INSTALLING in e.message),
        "updates": sum(1 for e in entries if UPDATED in e.message),
    }


def recently_used_models(path: Optional[Path] = None, lookback: int = UNUSED_LOOKBACK_LINES) -> Set[str]:
    return {e.last_word for e in read_entries(path, tail=lookback) if SWITCHED in e.message}


def unused_models(installed: List[str], path: Optional[Path] = None) -> List[str]:
    """Installed models with no recent switch entry"""
    used = recently_used_models(path)
    return [m for m in installed if m not in used]
