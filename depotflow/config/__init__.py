"""Configuration helpers for depotflow runtime files.

Loads the build target table from YAML with schema validation so new
targets can be added without touching code. The packaged
``targets.yaml`` is used unless an operator supplies its own file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from depotflow.core.errors import ConfigError
from depotflow.services.steam.models import DEFAULT_BRANCH, UploadTarget
from depotflow.services.steam.registry import TargetRegistry


CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_TARGETS_PATH = CONFIG_DIR / "targets.yaml"


class TargetValidationError(ConfigError):
    """Raised when a build target entry fails validation."""


def load_target_registry(path: str | Path | None = None) -> TargetRegistry:
    """Load the build target registry from ``path`` (packaged table by default)."""

    targets_path = Path(path) if path else DEFAULT_TARGETS_PATH
    raw = _load_yaml(targets_path)
    return build_target_registry(raw.get("targets"))


def default_registry() -> TargetRegistry:
    return load_target_registry(DEFAULT_TARGETS_PATH)


def build_target_registry(data: Any) -> TargetRegistry:
    if not isinstance(data, Mapping) or not data:
        raise TargetValidationError("targets must be a non-empty mapping")
    entries: dict[str, UploadTarget] = {}
    for key, value in data.items():
        entries[str(key)] = _build_target(str(key), value)
    return TargetRegistry(entries)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Target file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError("Target configuration must be a mapping")
    return data


def _build_target(key: str, value: Any) -> UploadTarget:
    if not isinstance(value, Mapping):
        raise TargetValidationError(f"Target '{key}' must be a mapping")
    branch = value.get("branch", DEFAULT_BRANCH)
    if branch is None:
        branch = DEFAULT_BRANCH
    live = value.get("set_live", False)
    if not isinstance(live, bool):
        raise TargetValidationError(f"Target '{key}' set_live must be a boolean")
    return UploadTarget(
        app_id=_require_int(key, value, "app_id"),
        depot_id=_require_int(key, value, "depot_id"),
        branch=str(branch),
        set_live=live,
    )


def _require_int(key: str, value: Mapping[str, Any], field: str) -> int:
    raw = value.get(field)
    if isinstance(raw, bool) or raw is None:
        raise TargetValidationError(f"Target '{key}' is missing integer {field}")
    try:
        number = int(raw)
    except (TypeError, ValueError) as exc:
        raise TargetValidationError(f"Target '{key}' {field} must be an integer") from exc
    if number <= 0:
        raise TargetValidationError(f"Target '{key}' {field} must be positive")
    return number


__all__ = [
    "DEFAULT_TARGETS_PATH",
    "TargetValidationError",
    "build_target_registry",
    "default_registry",
    "load_target_registry",
]
