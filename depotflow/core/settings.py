from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigMissingError


load_dotenv(override=False)

STEAM_USER_ENV = "STEAM_USER"
STEAM_CONFIG_ENV = "STEAM_CONFIG"
BUILD_TARGET_ENV = "BUILD_TARGET"
DISCORD_WEBHOOK_ENV = "DISCORD_WEBHOOK"
PROJECT_ROOT_ENV = "DEPOTFLOW_ROOT"
BUILDER_DIR_ENV = "DEPOTFLOW_BUILDER_DIR"
SCRATCH_DIR_ENV = "DEPOTFLOW_SCRATCH_DIR"
TARGETS_FILE_ENV = "DEPOTFLOW_TARGETS"
WORK_DIR_ENV = "DEPOTFLOW_WORK_DIR"
LOG_LEVEL_ENV = "DEPOTFLOW_LOG_LEVEL"

DEFAULT_BUILDER_DIR = Path("Assets") / "Editor" / "Builder"
SCRATCH_DIR_NAME = "depotflow_steam_build"


@dataclass(frozen=True, slots=True)
class UploadConfig:
    """Per-invocation upload configuration.

    Attributes:
        user: steamcmd login name.
        encoded_secrets: Base64 encoded contents of steamcmd's config.vdf.
        build_target_key: Lower-cased build target selector.
        build_path: Exported build location handed over by the pipeline.
    """

    user: str
    encoded_secrets: str
    build_target_key: str
    build_path: str


@dataclass(frozen=True, slots=True)
class PublishSettings:
    """Filesystem locations and optional endpoints resolved from the environment."""

    project_root: Path
    builder_dir: Path
    scratch_dir: Path
    targets_file: Path | None = None
    webhook_url: str | None = None


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _project_root() -> Path:
    env = _read_env(PROJECT_ROOT_ENV)
    if env:
        return Path(env)
    return Path.cwd()


def _work_dir() -> Path:
    env = _read_env(WORK_DIR_ENV)
    if env:
        return Path(env)
    return _project_root() / ".depotflow"


def _resolve_under_root(value: str | None, default: Path) -> Path:
    path = Path(value) if value else default
    if not path.is_absolute():
        path = _project_root() / path
    return Path(os.path.abspath(path))


def load_builder_dir() -> Path:
    """Return the directory holding the steamcmd installation."""

    return _resolve_under_root(_read_env(BUILDER_DIR_ENV), DEFAULT_BUILDER_DIR)


def load_scratch_dir() -> Path:
    """Return the directory used for the manifest and steamcmd build output."""

    value = _read_env(SCRATCH_DIR_ENV)
    if value:
        return Path(os.path.abspath(value))
    return Path(tempfile.gettempdir()) / SCRATCH_DIR_NAME


def load_targets_file() -> Path | None:
    value = _read_env(TARGETS_FILE_ENV)
    if value is None:
        return None
    return _resolve_under_root(value, Path(value))


def load_webhook_url() -> str | None:
    return _read_env(DISCORD_WEBHOOK_ENV)


def resolve_settings() -> PublishSettings:
    """Resolve filesystem settings and the optional webhook from the environment."""

    return PublishSettings(
        project_root=_project_root(),
        builder_dir=load_builder_dir(),
        scratch_dir=load_scratch_dir(),
        targets_file=load_targets_file(),
        webhook_url=load_webhook_url(),
    )


def load_upload_config(build_path: str | Path) -> UploadConfig:
    """Build the upload configuration for a single publish run.

    Raises:
        ConfigMissingError: If any of STEAM_USER, STEAM_CONFIG or BUILD_TARGET
            is unset or blank.
    """

    user = _read_env(STEAM_USER_ENV)
    secrets = _read_env(STEAM_CONFIG_ENV)
    target = _read_env(BUILD_TARGET_ENV)
    missing = [
        name
        for name, value in (
            (STEAM_USER_ENV, user),
            (STEAM_CONFIG_ENV, secrets),
            (BUILD_TARGET_ENV, target),
        )
        if not value
    ]
    if missing:
        raise ConfigMissingError(missing)
    return UploadConfig(
        user=user,  # type: ignore[arg-type]
        encoded_secrets=secrets,  # type: ignore[arg-type]
        build_target_key=target.lower(),  # type: ignore[union-attr]
        build_path=str(build_path),
    )


__all__ = [
    "UploadConfig",
    "PublishSettings",
    "STEAM_USER_ENV",
    "STEAM_CONFIG_ENV",
    "BUILD_TARGET_ENV",
    "DISCORD_WEBHOOK_ENV",
    "PROJECT_ROOT_ENV",
    "BUILDER_DIR_ENV",
    "SCRATCH_DIR_ENV",
    "TARGETS_FILE_ENV",
    "WORK_DIR_ENV",
    "LOG_LEVEL_ENV",
    "load_builder_dir",
    "load_scratch_dir",
    "load_targets_file",
    "load_webhook_url",
    "load_upload_config",
    "resolve_settings",
]
