"""Typer based command line entry points for depotflow."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from depotflow.config import default_registry, load_target_registry
from depotflow.core.logger import get_logger, set_log_level
from depotflow.core.pipeline import publish
from depotflow.core.settings import load_scratch_dir, load_targets_file
from depotflow.services.steam.manifest import ManifestBuilder
from depotflow.services.steam.registry import TargetRegistry

LOGGER = get_logger()

app = typer.Typer(help="Publish exported builds to Steam.")


def _handle_error(exc: Exception) -> None:
    LOGGER.error("depotflow operation failed: %s", exc, exc_info=True)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _load_registry(targets_file: Optional[Path]) -> TargetRegistry:
    path = targets_file or load_targets_file()
    if path is None:
        return default_registry()
    return load_target_registry(path)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING). Defaults to DEPOTFLOW_LOG_LEVEL or INFO.",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    if log_level is not None and not set_log_level(log_level):
        raise typer.BadParameter(f"Unknown log level: {log_level}")


@app.command("publish")
def cmd_publish(
    build_path: Path = typer.Argument(..., help="Exported build directory or a file inside it"),
) -> None:
    """Upload an exported build with steamcmd and notify Discord.

    Always exits with code 0; the outcome is reported through logs and the
    Discord notification.
    """

    publish(build_path)


@app.command("targets")
def cmd_targets(
    targets_file: Optional[Path] = typer.Option(None, "--targets-file", help="Override build target YAML"),
) -> None:
    """List registered build targets."""

    try:
        registry = _load_registry(targets_file)
    except Exception as exc:
        _handle_error(exc)
        return
    for key, target in registry.items():
        live = "live" if target.set_live else "-"
        typer.echo(f"{key:20} app={target.app_id:<10} depot={target.depot_id:<10} branch={target.branch:12} {live}")


@app.command("manifest")
def cmd_manifest(
    target_key: str = typer.Option(..., "--target", help="Build target key"),
    content_root: Path = typer.Option(..., "--content-root", exists=True, file_okay=False, help="Build output directory"),
    out: Optional[Path] = typer.Option(None, "--out", help="Directory for the manifest (defaults to the scratch dir)"),
    targets_file: Optional[Path] = typer.Option(None, "--targets-file", help="Override build target YAML"),
) -> None:
    """Write the app build manifest for a target without uploading."""

    try:
        registry = _load_registry(targets_file)
        target = registry.lookup(target_key)
        manifest_path = ManifestBuilder().build(target, content_root, out or load_scratch_dir())
    except Exception as exc:
        _handle_error(exc)
        return
    typer.echo(str(manifest_path))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
