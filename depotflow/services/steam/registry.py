"""Lookup table from build target keys to Steam upload targets."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

from depotflow.core.errors import ConfigError, UnknownTargetError

from .models import UploadTarget


def normalize_key(key: str) -> str:
    return key.strip().lower()


class TargetRegistry:
    """Immutable mapping of case-insensitive build target keys to upload targets."""

    def __init__(self, entries: Mapping[str, UploadTarget]) -> None:
        normalized: dict[str, UploadTarget] = {}
        for key, target in entries.items():
            norm = normalize_key(key)
            if not norm:
                raise ConfigError("Build target keys must not be empty")
            if norm in normalized:
                raise ConfigError(f"Duplicate build target key after normalization: {key}")
            normalized[norm] = target
        self._entries = MappingProxyType(normalized)

    def lookup(self, key: str) -> UploadTarget:
        """Return the upload target for ``key``.

        Raises:
            UnknownTargetError: If no target is registered under the key.
        """

        try:
            return self._entries[normalize_key(key)]
        except KeyError:
            raise UnknownTargetError(key) from None

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def items(self) -> tuple[tuple[str, UploadTarget], ...]:
        return tuple(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TargetRegistry({dict(self._entries)!r})"


__all__ = ["TargetRegistry", "normalize_key"]
