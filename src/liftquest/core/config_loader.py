"""
YAML → typed config loader.

Loads progression catalogs from progression.yaml (bundled with the package)
and optionally merges user overrides from ~/.liftquest/progression.yaml.

Usage:
    from liftquest.core.config_loader import load_progression_config
    cfg = load_progression_config()
    titles = cfg.get("level_titles", {})

If the bundled YAML cannot be parsed, lookups fall back to the engines'
Python defaults (no crash).  If the user override file exists but has parse
errors, a warning is emitted and the file is ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; warn and return {} when it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"liftquest: ignoring unreadable config {path} ({exc})", stacklevel=2)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(f"liftquest: ignoring {path}: top level must be a mapping", stacklevel=2)
        return {}
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_data_dir() -> Path:
    """Return the directory holding the bundled YAML catalogs."""
    # config_loader.py lives at src/liftquest/core/config_loader.py
    return Path(__file__).parent.parent / "data"


def get_user_config_dir() -> Path:
    """Return ~/.liftquest (which may not exist)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".liftquest"


def load_catalog(filename: str) -> dict[str, Any]:
    """
    Load and merge one YAML catalog.

    Load order (later overrides earlier):
    1. Bundled src/liftquest/data/<filename>
    2. User override at ~/.liftquest/<filename>

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_data_dir() / filename
    if bundled.exists():
        config = deep_merge(config, load_yaml_file(bundled))

    user = get_user_config_dir() / filename
    if user.exists():
        user_cfg = load_yaml_file(user)
        if user_cfg:
            config = deep_merge(config, user_cfg)

    return config


def load_progression_config() -> dict[str, Any]:
    """Return the merged progression.yaml catalog."""
    return load_catalog("progression.yaml")
