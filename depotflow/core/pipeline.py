from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .errors import (
    BuildPathNotFoundError,
    ConfigDecodeError,
    ConfigMissingError,
    CredentialStageError,
    ManifestWriteError,
    ToolNotFoundError,
    UnknownTargetError,
)
from .logger import get_logger
from .settings import load_upload_config, load_webhook_url, resolve_settings
from depotflow.config import default_registry, load_target_registry
from depotflow.services.notify.discord import NotificationDispatcher, build_outcome_fields, format_fields
from depotflow.services.steam.manifest import ManifestBuilder
from depotflow.services.steam.models import InvocationResult
from depotflow.services.steam.registry import TargetRegistry
from depotflow.services.steam.sanitizer import DirectorySanitizer
from depotflow.services.steam.steamcmd import SteamCmdInvoker, decode_config_blob, resolve_tool_path


InvokerFactory = Callable[[Path], SteamCmdInvoker]


def resolve_build_dir(build_path: str | Path) -> Path:
    """Return the directory to upload for an exported build path.

    A directory is used as is; an existing file means its parent directory.

    Raises:
        BuildPathNotFoundError: If neither applies.
    """

    path = Path(build_path)
    if path.is_dir():
        return path
    if path.is_file() and path.parent.is_dir():
        return path.parent
    raise BuildPathNotFoundError(f"Build directory not found at path: {build_path}")


class Publisher:
    """Coordinates Resolve -> Sanitize -> Manifest -> Upload -> Notify steps.

    ``publish`` never raises; every skipped or failed step is logged and the
    outcome of an attempted upload is reported through the dispatcher.
    """

    def __init__(
        self,
        registry: TargetRegistry,
        *,
        builder_dir: str | Path,
        scratch_dir: str | Path,
        sanitizer: DirectorySanitizer | None = None,
        manifest_builder: ManifestBuilder | None = None,
        invoker_factory: InvokerFactory | None = None,
        dispatcher: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] | None = None,
        platform: str | None = None,
        logger=None,
    ) -> None:
        self.registry = registry
        self.builder_dir = Path(builder_dir)
        self.scratch_dir = Path(scratch_dir)
        self.sanitizer = sanitizer or DirectorySanitizer()
        self.manifest_builder = manifest_builder or ManifestBuilder()
        self.invoker_factory = invoker_factory or SteamCmdInvoker
        self.dispatcher = dispatcher
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.platform = platform
        self.logger = logger or get_logger()

    def publish(self, build_output_path: str | Path) -> None:
        try:
            self._publish(build_output_path)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Unexpected error during Steam upload: %s", exc, exc_info=True)

    def _publish(self, build_output_path: str | Path) -> None:
        # 1. Configuration
        try:
            config = load_upload_config(build_output_path)
        except ConfigMissingError as exc:
            self.logger.warning("%s. Skipping Steam upload.", exc)
            return

        # 2. Target and credentials
        try:
            target = self.registry.lookup(config.build_target_key)
        except UnknownTargetError as exc:
            self.logger.warning("%s. Skipping Steam upload.", exc)
            return
        try:
            credentials = decode_config_blob(config.encoded_secrets)
        except ConfigDecodeError as exc:
            self.logger.error("%s. Skipping Steam upload.", exc)
            return

        # 3. Tool and build directory
        invoker = self.invoker_factory(resolve_tool_path(self.builder_dir, self.platform))
        try:
            invoker.ensure_tool()
            build_dir = resolve_build_dir(config.build_path)
        except (ToolNotFoundError, BuildPathNotFoundError) as exc:
            self.logger.error("%s. Skipping Steam upload.", exc)
            return

        # 4. Sanitize, then describe what is left
        removed = self.sanitizer.clean(build_dir)
        self.logger.info("steam.publish sanitized build_dir=%s removed=%d", build_dir, removed)
        try:
            manifest_path = self.manifest_builder.build(target, build_dir, self.scratch_dir)
        except ManifestWriteError as exc:
            self.logger.error("%s. Skipping Steam upload.", exc)
            return

        # 5. Upload
        try:
            result = invoker.run(manifest_path, config, target, credentials)
        except (CredentialStageError, ToolNotFoundError) as exc:
            self.logger.error("%s. Skipping Steam upload.", exc)
            return

        self._report(result)

    def _report(self, result: InvocationResult) -> None:
        when = self.clock()
        summary = format_fields(build_outcome_fields(result, when))
        if result.succeeded:
            self.logger.info("Steam upload completed successfully in %.2f seconds.", result.duration_seconds)
            self.logger.info(summary)
        else:
            self.logger.error(
                "Steam upload failed with exit code %d. Duration: %.2f seconds.",
                result.exit_code,
                result.duration_seconds,
            )
            self.logger.error(summary)
        dispatcher = self.dispatcher or NotificationDispatcher(load_webhook_url())
        dispatcher.notify_result(result, when)


def publish(build_output_path: str | Path) -> None:
    """Publish an exported build to Steam using environment configuration.

    Entry point for the build pipeline; returns normally in every case.
    """

    logger = get_logger()
    try:
        settings = resolve_settings()
        if settings.targets_file is not None:
            registry = load_target_registry(settings.targets_file)
        else:
            registry = default_registry()
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to load publish configuration: %s. Skipping Steam upload.", exc, exc_info=True)
        return
    publisher = Publisher(
        registry,
        builder_dir=settings.builder_dir,
        scratch_dir=settings.scratch_dir,
        dispatcher=NotificationDispatcher(settings.webhook_url),
        logger=logger,
    )
    publisher.publish(build_output_path)


__all__ = ["Publisher", "publish", "resolve_build_dir"]
