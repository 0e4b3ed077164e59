"""Real-time host monitoring dashboard."""

from __future__ import annotations

__all__ = [
    "MetricsSampler",
    "SystemSnapshot",
    "create_app",
    "render_report",
]

from .data import MetricsSampler  # noqa: E402
from .models import SystemSnapshot  # noqa: E402
from .reporting import render_report  # noqa: E402
from .web import create_app  # noqa: E402
