"""Ollama Manager v2.0 - Model Layer"""

from .config import SCRIPT_VERSION, DEFAULT_SETTINGS, CATEGORIES, AppPaths, get_paths
from .catalog import CATALOG, ModelInfo, compatible_models, search_models, load_catalog
from .resource_monitor import get_monitor, ResourceMonitor, SystemStats
from .ollama_client import get_client, OllamaClient

__all__ = [
    "SCRIPT_VERSION",
    "DEFAULT_SETTINGS",
    "CATEGORIES",
    "AppPaths",
    "get_paths",
    "CATALOG",
    "ModelInfo",
    "compatible_models",
    "search_models",
    "load_catalog",
    "get_monitor",
    "ResourceMonitor",
    "SystemStats",
    "get_client",
    "OllamaClient",
]
