"""Removal of do-not-ship folders from an exported build."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Sequence

from depotflow.core.logger import get_logger

LOGGER = get_logger()

DEFAULT_MARKERS = ("donotship", "dontship")


class DirectorySanitizer:
    """Delete every directory whose name contains a do-not-ship marker."""

    def __init__(self, markers: Sequence[str] = DEFAULT_MARKERS) -> None:
        self.markers = tuple(marker.lower() for marker in markers if marker)

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        return any(marker in lowered for marker in self.markers)

    def clean(self, root: str | Path) -> int:
        """Remove matching subtrees below ``root`` in place.

        Matched directories are not descended into. A directory that cannot be
        removed is logged and skipped. Returns the number of removed subtrees.
        """

        removed = 0
        for current, dirnames, _files in os.walk(root, topdown=True):
            keep: list[str] = []
            for name in dirnames:
                if not self.matches(name):
                    keep.append(name)
                    continue
                path = os.path.join(current, name)
                try:
                    shutil.rmtree(path)
                except OSError as exc:
                    LOGGER.error("steam.sanitize delete_failed path=%s error=%s", path, exc)
                    continue
                removed += 1
                LOGGER.info("steam.sanitize deleted path=%s", path)
            dirnames[:] = keep
        return removed


__all__ = ["DEFAULT_MARKERS", "DirectorySanitizer"]
