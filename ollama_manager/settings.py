"""
Ollama Manager Settings
Flat JSON preferences file, rewritten wholesale on every change.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

from .models.config import get_paths, DEFAULT_SETTINGS


def _settings_file(path: Optional[Path] = None) -> Path:
    return path or get_paths().config_file


def init_settings(path: Optional[Path] = None) -> Path:
    """Create the preferences file with defaults if missing"""
    path = _settings_file(path)
    if not path.exists():
        save_settings(DEFAULT_SETTINGS, path)
    return path


def load_settings(path: Optional[Path] = None) -> dict:
    """Load preferences, filling any missing keys from defaults"""
    path = _settings_file(path)
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if not path.exists():
        return settings
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"⚠️  Could not read {path}: {e}")
        return settings
    if isinstance(data, dict):
        settings.update(data)
    return settings


def save_settings(settings: dict, path: Optional[Path] = None):
    """Write to a temp file then rename over the original"""
    path = _settings_file(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w") as f:
        json.dump(settings, f, indent=4)
    os.replace(tmp, path)


def get_setting(key: str, default: Any = "", path: Optional[Path] = None) -> Any:
    """Read one key; absent keys and unreadable files yield default"""
    path = _settings_file(path)
    if not path.exists():
        return default
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError):
        return default
    if not isinstance(data, dict) or data.get(key) is None:
        return default
    return data[key]


def set_setting(key: str, value: Any, path: Optional[Path] = None) -> dict:
    settings = load_settings(path)
    settings[key] = value
    save_settings(settings, path)
    return settings


def add_preferred_model(model: str, path: Optional[Path] = None) -> bool:
    """Append to preferred_models; False when already present"""
    settings = load_settings(path)
    preferred = list(settings.get("preferred_models") or [])
    if model in preferred:
        return False
    preferred.append(model)
    settings["preferred_models"] = preferred
    save_settings(settings, path)
    return True


def reset_settings(path: Optional[Path] = None) -> dict:
    save_settings(DEFAULT_SETTINGS, path)
    return copy.deepcopy(DEFAULT_SETTINGS)


def is_first_run(path: Optional[Path] = None) -> bool:
    """No preferences yet, or no UI mode chosen"""
    path = _settings_file(path)
    return not path.exists() or get_setting("ui_mode", "", path) == ""


def parse_value(raw: str) -> Any:
    """Coerce a --set value: true/false, integers, else the raw string"""
    value = raw.strip()
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if value.isdigit():
        return int(value)
    return value
