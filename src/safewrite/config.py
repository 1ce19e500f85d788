"""safewrite configuration.

Config files:
  - Global:  ~/.config/safewrite/config.json
  - Project: .safewrite.json (current directory)

Merge order: global → project → environment variables (highest priority).
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

from .file_io import write_text
from .perm import restore_permissions
from .prompt import always
from .status import StatusRegistry


class Scope(str, Enum):
    GLOBAL = "global"
    PROJECT = "project"


BOOL_KEYS = ("debug", "assume_yes", "restore_perm")
KNOWN_KEYS = (*BOOL_KEYS, "log_file")

_ENV_OVERRIDES: list[tuple[str, str]] = [
    ("debug", "SAFEWRITE_DEBUG"),
    ("log_file", "SAFEWRITE_LOG_FILE"),
    ("assume_yes", "SAFEWRITE_ASSUME_YES"),
    ("restore_perm", "SAFEWRITE_RESTORE_PERM"),
]

DEFAULTS: Dict[str, Any] = {
    "debug": False,
    "log_file": None,
    "assume_yes": False,
    "restore_perm": False,
}


def config_path(scope: Scope) -> Path:
    if scope is Scope.PROJECT:
        return Path.cwd() / ".safewrite.json"
    return Path.home() / ".config" / "safewrite" / "config.json"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def load_config() -> Dict[str, Any]:
    """Load merged config: defaults → global → project → env vars."""
    merged: Dict[str, Any] = dict(DEFAULTS)
    merged.update(_read_json(config_path(Scope.GLOBAL)))
    merged.update(_read_json(config_path(Scope.PROJECT)))
    _apply_env_overrides(merged)
    return merged


def load_raw_config(scope: Scope) -> Dict[str, Any]:
    """Load config for a specific scope without merge/env overrides."""
    return _read_json(config_path(scope))


def _apply_env_overrides(merged: Dict[str, Any]) -> None:
    for config_key, env_var in _ENV_OVERRIDES:
        val = os.environ.get(env_var)
        if not val:
            continue
        if config_key in BOOL_KEYS:
            merged[config_key] = parse_bool(val)
        else:
            merged[config_key] = val


def set_value(data: Dict[str, Any], key: str, raw: str) -> Dict[str, Any]:
    """Set *key* from its string form, validating the key name."""
    if key not in KNOWN_KEYS:
        raise KeyError(key)
    data[key] = parse_bool(raw) if key in BOOL_KEYS else raw
    return data


def save_config(data: Dict[str, Any], scope: Scope) -> None:
    """Save config to the specified scope, keeping a ``~`` backup."""
    path = config_path(scope)
    path.parent.mkdir(parents=True, exist_ok=True)
    fh = write_text(
        path,
        json.dumps(data, indent=2, ensure_ascii=False) + "\n",
        confirm=always,
        registry=StatusRegistry(),
    )
    restore_permissions(fh)
    logger.debug("Saved %s config to %s", scope.value, path)
