"""steamcmd invocation: credential staging, command line and process output."""

from __future__ import annotations

import base64
import binascii
import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import IO, Callable

from depotflow.core.errors import ConfigDecodeError, CredentialStageError, ToolNotFoundError
from depotflow.core.logger import get_logger
from depotflow.core.settings import UploadConfig

from .models import InvocationResult, UploadTarget

LOGGER = get_logger()

CONFIG_DIR_NAME = "config"
CONFIG_FILE_NAME = "config.vdf"
LAUNCH_FAILED_EXIT_CODE = -1


def tool_executable_name(platform: str | None = None) -> str:
    platform = sys.platform if platform is None else platform
    return "steamcmd.exe" if platform.startswith("win") else "steamcmd"


def resolve_tool_path(builder_dir: str | Path, platform: str | None = None) -> Path:
    """Return the absolute steamcmd path inside ``builder_dir``."""

    return Path(os.path.abspath(Path(builder_dir) / tool_executable_name(platform)))


def decode_config_blob(encoded: str) -> str:
    """Decode the base64 steamcmd config.vdf payload.

    Raises:
        ConfigDecodeError: If the payload is not valid base64 or not UTF-8 text.
    """

    try:
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigDecodeError(f"Failed to decode STEAM_CONFIG from base64: {exc}") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigDecodeError(f"STEAM_CONFIG is not valid UTF-8 text: {exc}") from exc


class SteamCmdInvoker:
    """Run steamcmd against an app build manifest and classify the exit code."""

    def __init__(
        self,
        tool_path: str | Path,
        *,
        popen: Callable[..., subprocess.Popen] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.tool_path = Path(tool_path)
        self._popen = popen or subprocess.Popen
        self._clock = clock or time.monotonic

    @property
    def tool_dir(self) -> Path:
        return self.tool_path.parent

    @property
    def config_path(self) -> Path:
        return self.tool_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME

    def ensure_tool(self) -> None:
        if not self.tool_path.is_file():
            raise ToolNotFoundError(f"SteamCMD not found at path: {self.tool_path}")

    def stage_credentials(self, content: str) -> Path:
        """Write the decoded config.vdf next to steamcmd, replacing any previous copy.

        Raises:
            CredentialStageError: If the config directory or file cannot be written.
        """

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(content, encoding="utf-8", newline="")
        except OSError as exc:
            raise CredentialStageError(f"Failed to write steamcmd config at {self.config_path}: {exc}") from exc
        LOGGER.info("steamcmd.config staged path=%s", self.config_path)
        return self.config_path

    def build_command(self, user: str, manifest_path: str | Path) -> list[str]:
        return [
            str(self.tool_path),
            "+login",
            user,
            "+run_app_build",
            str(manifest_path),
            "+quit",
        ]

    def run(
        self,
        manifest_path: str | Path,
        config: UploadConfig,
        target: UploadTarget,
        credentials: str,
    ) -> InvocationResult:
        """Stage credentials, run steamcmd to completion and report the outcome.

        ``credentials`` is the already decoded config.vdf text.

        Raises:
            ToolNotFoundError: If the steamcmd executable is missing.
            CredentialStageError: If the config file cannot be written.
        """

        self.ensure_tool()
        self.stage_credentials(credentials)
        command = self.build_command(config.user, manifest_path)

        LOGGER.info("Starting Steam upload for build target: %s", config.build_target_key)
        start = self._clock()
        try:
            exit_code = self._execute(command)
        except Exception as exc:  # noqa: BLE001
            duration = self._clock() - start
            LOGGER.error("Exception during Steam upload: %s", exc, exc_info=True)
            return InvocationResult(
                exit_code=LAUNCH_FAILED_EXIT_CODE,
                duration_seconds=duration,
                target=target,
                build_target_key=config.build_target_key,
                error=str(exc),
            )
        duration = self._clock() - start
        LOGGER.info("steamcmd.run finished exit_code=%d duration=%.2fs", exit_code, duration)
        return InvocationResult(
            exit_code=exit_code,
            duration_seconds=duration,
            target=target,
            build_target_key=config.build_target_key,
        )

    # Internal helpers -------------------------------------------------

    def _execute(self, command: list[str]) -> int:
        process = self._popen(
            command,
            cwd=str(self.tool_dir),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        readers = [
            threading.Thread(
                target=_drain,
                args=(process.stdout, LOGGER.info),
                name="steamcmd-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=_drain,
                args=(process.stderr, LOGGER.error),
                name="steamcmd-stderr",
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()
        try:
            exit_code = process.wait()
        finally:
            for reader in readers:
                reader.join()
        return exit_code


def _drain(stream: IO[str] | None, emit: Callable[[str], None]) -> None:
    if stream is None:
        return
    with stream:
        for line in stream:
            line = line.rstrip("\r\n")
            if line:
                emit(line)


__all__ = [
    "CONFIG_FILE_NAME",
    "LAUNCH_FAILED_EXIT_CODE",
    "SteamCmdInvoker",
    "decode_config_blob",
    "resolve_tool_path",
    "tool_executable_name",
]
