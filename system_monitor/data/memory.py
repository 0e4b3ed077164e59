"""Memory data collection."""

from __future__ import annotations

import psutil

from system_monitor.models import MemoryInfo


def collect_memory_info() -> MemoryInfo:
    mem = psutil.virtual_memory()
    # "free" follows the dashboard's meaning: memory available to new processes
    return MemoryInfo.from_totals(int(mem.total), int(mem.available))
