"""CLI command groups."""

from .bridge import bridge_app

__all__ = ["bridge_app"]
