"""App build manifest (VDF) generation for steamcmd ``+run_app_build``."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from depotflow.core.errors import ManifestWriteError
from depotflow.core.logger import get_logger

from .models import UploadTarget

LOGGER = get_logger()

INDENT = "    "
DESCRIPTION_PREFIX = "depotflow automated build"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def escape_vdf(value: str) -> str:
    """Escape backslashes and double quotes for a quoted VDF value."""

    return value.replace("\\", "\\\\").replace('"', '\\"')


def manifest_filename(target: UploadTarget) -> str:
    return f"app_build_{target.app_id}.vdf"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ManifestBuilder:
    """Render and write the app build script consumed by steamcmd."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow

    def render(self, target: UploadTarget, content_root: str | Path, scratch_dir: str | Path) -> str:
        """Return the manifest text for ``target``.

        ``content_root`` is made absolute; every file below it is mapped
        recursively into the depot root.
        """

        stamp = self._clock().astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
        root = os.path.abspath(os.fspath(content_root))
        lines = [
            '"appbuild"',
            "{",
            _pair(1, "appid", str(target.app_id)),
            _pair(1, "desc", f"{DESCRIPTION_PREFIX} {stamp} UTC"),
            _pair(1, "buildoutput", os.path.abspath(os.fspath(scratch_dir))),
        ]
        if target.set_live and target.branch.strip():
            lines.append(_pair(1, "setlive", target.branch))
        lines.extend(
            [
                f'{INDENT}"depots"',
                f"{INDENT}{{",
                f'{INDENT * 2}"{target.depot_id}"',
                f"{INDENT * 2}{{",
                _pair(3, "contentroot", root),
                f'{INDENT * 3}"filemapping"',
                f"{INDENT * 3}{{",
                _pair(4, "localpath", "*"),
                _pair(4, "depotpath", "."),
                _pair(4, "recursive", "1"),
                f"{INDENT * 3}}}",
                f"{INDENT * 2}}}",
                f"{INDENT}}}",
                "}",
            ]
        )
        return "\n".join(lines) + "\n"

    def build(self, target: UploadTarget, content_root: str | Path, scratch_dir: str | Path) -> Path:
        """Write the manifest into ``scratch_dir`` and return its path.

        Raises:
            ManifestWriteError: If the scratch directory or file cannot be written.
        """

        scratch = Path(scratch_dir)
        manifest_path = scratch / manifest_filename(target)
        try:
            scratch.mkdir(parents=True, exist_ok=True)
            text = self.render(target, content_root, scratch)
            manifest_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ManifestWriteError(f"Failed to write app build manifest at {manifest_path}: {exc}") from exc
        LOGGER.info("steam.manifest written path=%s app_id=%s depot_id=%s", manifest_path, target.app_id, target.depot_id)
        return manifest_path


def _pair(depth: int, key: str, value: str) -> str:
    return f'{INDENT * depth}"{key}" "{escape_vdf(value)}"'


__all__ = ["ManifestBuilder", "escape_vdf", "manifest_filename"]
