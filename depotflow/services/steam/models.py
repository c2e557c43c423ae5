"""Domain models for Steam depot uploads."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BRANCH = "default"


@dataclass(frozen=True, slots=True)
class UploadTarget:
    """Steam app/depot pair a build target is uploaded to."""

    app_id: int
    depot_id: int
    branch: str = DEFAULT_BRANCH
    set_live: bool = False


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Outcome of a single steamcmd run."""

    exit_code: int
    duration_seconds: float
    target: UploadTarget
    build_target_key: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


__all__ = ["DEFAULT_BRANCH", "UploadTarget", "InvocationResult"]
