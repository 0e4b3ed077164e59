"""Static CPU facts and operating system summary."""

from __future__ import annotations

import platform
import socket
import time
from pathlib import Path

import psutil

from system_monitor.models import CPU_MODEL_UNAVAILABLE, UNKNOWN, CPUInfo, OSInfo, Platform

_CPUINFO_PATH = Path("/proc/cpuinfo")


def _read_cpuinfo_model() -> str | None:
    if not _CPUINFO_PATH.exists():
        return None
    try:
        text = _CPUINFO_PATH.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    for line in text.splitlines():
        key, _, value = line.partition(":")
        if key.strip() in {"model name", "Hardware", "cpu model"} and value.strip():
            return value.strip()
    return None


def _cpu_model() -> str:
    return _read_cpuinfo_model() or platform.processor() or CPU_MODEL_UNAVAILABLE


def _clock_speed_mhz() -> int:
    try:
        freq = psutil.cpu_freq()
    except (NotImplementedError, OSError, RuntimeError):  # pragma: no cover - platform specific
        return 0
    if not freq:
        return 0
    return max(0, int(freq.current))


def detect_core_count() -> int:
    return psutil.cpu_count(logical=True) or 1


def collect_cpu_info(core_count: int | None = None) -> CPUInfo:
    """Return CPU facts; usage and load are filled in by the sampler."""

    return CPUInfo(
        model=_cpu_model(),
        core_count=max(1, core_count or detect_core_count()),
        architecture=platform.machine() or UNKNOWN,
        clock_speed_mhz=_clock_speed_mhz(),
    )


def collect_os_info(platform_kind: Platform, *, now: float | None = None) -> OSInfo:
    timestamp = time.time() if now is None else now
    uname = platform.uname()
    hostname = getattr(uname, "node", None) or socket.gethostname() or UNKNOWN
    uptime_seconds = max(0, int(timestamp - psutil.boot_time()))
    return OSInfo(
        platform=platform_kind,
        kernel_type=uname.system or UNKNOWN,
        release_version=uname.release or UNKNOWN,
        hostname=hostname,
        uptime_seconds=uptime_seconds,
    )
