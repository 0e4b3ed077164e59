"""Models exported by System Monitor."""

from .snapshot import (
    CPU_MODEL_UNAVAILABLE,
    UNKNOWN,
    CPUInfo,
    MemoryInfo,
    NetworkAddress,
    NetworkInfo,
    NetworkInterface,
    OSInfo,
    Platform,
    SystemSnapshot,
)

__all__ = [
    "CPU_MODEL_UNAVAILABLE",
    "UNKNOWN",
    "CPUInfo",
    "MemoryInfo",
    "NetworkAddress",
    "NetworkInfo",
    "NetworkInterface",
    "OSInfo",
    "Platform",
    "SystemSnapshot",
]
