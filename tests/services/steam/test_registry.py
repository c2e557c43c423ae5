from __future__ import annotations

import pytest

from depotflow.config import (
    TargetValidationError,
    build_target_registry,
    default_registry,
    load_target_registry,
)
from depotflow.core.errors import ConfigError, UnknownTargetError
from depotflow.services.steam.models import UploadTarget
from depotflow.services.steam.registry import TargetRegistry


def test_lookup_is_case_insensitive(registry):
    assert registry.lookup("WINDOWS") == registry.lookup("windows")
    assert registry.lookup(" linux-beta ").branch == "beta"
    assert "LINUX-BETA" in registry


def test_lookup_unknown_key_raises(registry):
    with pytest.raises(UnknownTargetError) as excinfo:
        registry.lookup("macos")
    assert excinfo.value.key == "macos"


def test_registry_is_immutable(registry):
    with pytest.raises(TypeError):
        registry._entries["macos"] = UploadTarget(app_id=1, depot_id=2)  # type: ignore[index]


def test_duplicate_keys_after_normalization_rejected():
    with pytest.raises(ConfigError):
        TargetRegistry(
            {
                "Windows": UploadTarget(app_id=1, depot_id=2),
                "windows": UploadTarget(app_id=3, depot_id=4),
            }
        )


def test_default_registry_contains_windows_targets():
    registry = default_registry()

    assert registry.lookup("windows") == UploadTarget(
        app_id=1541370, depot_id=1541373, branch="default", set_live=False
    )
    assert registry.lookup("windows-demo") == UploadTarget(app_id=3810460, depot_id=3810462)
    assert len(registry) == 2


def test_load_target_registry_from_yaml(tmp_path):
    targets = tmp_path / "targets.yaml"
    targets.write_text(
        "targets:\n"
        "  Playtest:\n"
        "    app_id: 42\n"
        "    depot_id: 43\n"
        "    branch: playtest\n"
        "    set_live: true\n",
        encoding="utf-8",
    )

    registry = load_target_registry(targets)

    assert registry.keys() == ("playtest",)
    assert registry.lookup("playtest") == UploadTarget(app_id=42, depot_id=43, branch="playtest", set_live=True)


def test_load_target_registry_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_target_registry(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"windows": "1541370"},
        {"windows": {"depot_id": 2}},
        {"windows": {"app_id": "abc", "depot_id": 2}},
        {"windows": {"app_id": 1, "depot_id": 2, "set_live": "yes"}},
        {"windows": {"app_id": True, "depot_id": 2}},
    ],
)
def test_invalid_target_entries_rejected(data):
    with pytest.raises(TargetValidationError):
        build_target_registry(data)
