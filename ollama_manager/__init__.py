"""
Ollama Manager v2.0 - Model management for the ollama CLI

Modules:
- models.config: paths, defaults, tier tables
- models.catalog: static catalog of known models
- models.resource_monitor: OS/CPU/RAM/GPU detection and live usage
- models.ollama_client: wrapper around the ollama binary
- settings: JSON preferences file
- usage_log: activity log and analytics
- recommender: ratings and tiered suggestions
- installer: dependencies, ollama install/update, model pulls
- optimizer: swap, governor and env tuning
- backup: tar.gz backups and cron scheduling
- bulk_ops: update/remove/export/import/clear
- menu: interactive screens
- manager_cli: ollama-manager entry point
"""

from .models.config import SCRIPT_VERSION

__version__ = SCRIPT_VERSION
__all__ = [
    "get_client",
    "get_monitor",
    "load_settings",
    "log_usage",
]

# Lazy imports for fast startup
def get_client():
    from .models.ollama_client import get_client as _get_client
    return _get_client()

def get_monitor():
    from .models.resource_monitor import get_monitor as _get_monitor
    return _get_monitor()

def load_settings():
    from .settings import load_settings as _load
    return _load()

def log_usage(message):
    from .usage_log import log_usage as _log
    return _log(message)
