"""Web application package for System Monitor."""

from __future__ import annotations

__all__ = [
    "create_app",
    "main",
]

from .server import create_app, main  # noqa: E402
