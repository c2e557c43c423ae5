from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the rotating log file out of the project workspace.
os.environ.setdefault("DEPOTFLOW_WORK_DIR", tempfile.mkdtemp(prefix="depotflow-tests-"))

from depotflow.core import settings  # noqa: E402
from depotflow.services.steam.models import UploadTarget  # noqa: E402
from depotflow.services.steam.registry import TargetRegistry  # noqa: E402

ENV_KEYS = (
    settings.STEAM_USER_ENV,
    settings.STEAM_CONFIG_ENV,
    settings.BUILD_TARGET_ENV,
    settings.DISCORD_WEBHOOK_ENV,
    settings.PROJECT_ROOT_ENV,
    settings.BUILDER_DIR_ENV,
    settings.SCRATCH_DIR_ENV,
    settings.TARGETS_FILE_ENV,
)


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def log_records():
    """Collect records emitted on the non-propagating ``depotflow`` logger."""

    logger = logging.getLogger("depotflow")
    handler = _ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


@pytest.fixture
def registry() -> TargetRegistry:
    return TargetRegistry(
        {
            "windows": UploadTarget(app_id=1541370, depot_id=1541373),
            "Linux-Beta": UploadTarget(app_id=111, depot_id=112, branch="beta", set_live=True),
        }
    )


@pytest.fixture
def make_stub_tool():
    """Return a factory creating an executable ``steamcmd`` shell script."""

    def _make(builder_dir: Path, script: str) -> Path:
        builder_dir.mkdir(parents=True, exist_ok=True)
        tool = builder_dir / "steamcmd"
        tool.write_text("#!/bin/sh\n" + script, encoding="utf-8")
        tool.chmod(0o755)
        return tool

    return _make
