"""Publish exported builds to Steam with steamcmd and report to Discord."""

from depotflow.core.pipeline import Publisher, publish

__version__ = "0.1.0"

__all__ = ["Publisher", "publish", "__version__"]
