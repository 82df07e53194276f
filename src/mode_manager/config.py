"""YAML-based configuration management.

Manages two files:
1. Global: ~/.config/mode-manager/config.yaml
2. Workspace selection: <workspace>/.mode-manager/selection.yaml

The global config names the catalog directory, the available languages and
the title markers that route a framework into the general-purpose bucket.
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from .catalog_parser import DEFAULT_GENERAL_MARKERS

# Default global config
DEFAULT_CONFIG: dict[str, Any] = {
    "catalog_dir": "~/.config/mode-manager/catalogs",
    "language": "en",
    "languages": ["en", "ru", "ua"],
    "general_markers": list(DEFAULT_GENERAL_MARKERS),
    "debug": False,
}


def get_config_dir() -> Path:
    """Get the mode-manager config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "mode-manager"


def get_config_path() -> Path:
    """Get the path to the global config file."""
    return get_config_dir() / "config.yaml"


def get_selection_path(workspace: Path) -> Path:
    """Get the per-workspace persisted selection path."""
    return workspace / ".mode-manager" / "selection.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config() -> dict[str, Any]:
    """Load the global config, filling gaps from DEFAULT_CONFIG."""
    config_path = get_config_path()
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            return copy.deepcopy(DEFAULT_CONFIG)
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)
    except FileNotFoundError:
        return copy.deepcopy(DEFAULT_CONFIG)
    except (yaml.YAMLError, OSError):
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(cfg: dict[str, Any]) -> None:
    """Save the global config."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(cfg, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def get_catalog_dir(cfg: dict[str, Any] | None = None) -> Path:
    """Get the directory holding stacks_by_framework_<lang>.md files."""
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("catalog_dir", DEFAULT_CONFIG["catalog_dir"])
    return Path(os.path.expanduser(str(raw)))


def get_languages(cfg: dict[str, Any] | None = None) -> list[str]:
    """Get the configured catalog languages, first one being the fallback."""
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("languages")
    if not isinstance(raw, list):
        return list(DEFAULT_CONFIG["languages"])
    languages = [str(lang) for lang in raw if str(lang).strip()]
    return languages or list(DEFAULT_CONFIG["languages"])


def get_language(cfg: dict[str, Any] | None = None) -> str:
    """Get the configured start language, falling back to the first known one."""
    if cfg is None:
        cfg = load_config()
    languages = get_languages(cfg)
    lang = str(cfg.get("language", languages[0]))
    return lang if lang in languages else languages[0]


def get_general_markers(cfg: dict[str, Any] | None = None) -> list[str]:
    """Get the title markers for the general-purpose bucket."""
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("general_markers")
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return list(DEFAULT_GENERAL_MARKERS)
    return [str(marker) for marker in raw if str(marker).strip()]
