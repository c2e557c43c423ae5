"""Steam depot publishing: target lookup, manifest, sanitizing and steamcmd."""

from .manifest import ManifestBuilder, escape_vdf
from .models import InvocationResult, UploadTarget
from .registry import TargetRegistry
from .sanitizer import DirectorySanitizer
from .steamcmd import SteamCmdInvoker, resolve_tool_path


__all__ = [
    "DirectorySanitizer",
    "InvocationResult",
    "ManifestBuilder",
    "SteamCmdInvoker",
    "TargetRegistry",
    "UploadTarget",
    "escape_vdf",
    "resolve_tool_path",
]
