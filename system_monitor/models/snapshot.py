"""Dataclasses representing a point-in-time system snapshot."""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

CPU_MODEL_UNAVAILABLE = "CPU information unavailable"
UNKNOWN = "unknown"


class Platform(str, Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"

    @property
    def is_unix_like(self) -> bool:
        return self is not Platform.WINDOWS

    @classmethod
    def detect(cls, name: str | None = None) -> "Platform":
        """Map a ``sys.platform`` style identifier to a :class:`Platform`."""

        value = (name if name is not None else sys.platform).lower()
        if value.startswith("win"):
            return cls.WINDOWS
        if value == "darwin":
            return cls.MACOS
        if value.startswith("linux"):
            return cls.LINUX
        return cls.OTHER


@dataclass(frozen=True, slots=True)
class CPUInfo:
    model: str = CPU_MODEL_UNAVAILABLE
    core_count: int = 1
    architecture: str = UNKNOWN
    usage_percent: float = 0.0
    load_average: tuple[float, float, float] = (0.0, 0.0, 0.0)
    clock_speed_mhz: int = 0


@dataclass(frozen=True, slots=True)
class MemoryInfo:
    total_bytes: int = 0
    free_bytes: int = 0
    used_bytes: int = 0
    usage_percent: float = 0.0

    @classmethod
    def from_totals(cls, total_bytes: int, free_bytes: int) -> "MemoryInfo":
        """Build memory figures, clamping corrupted readings into range."""

        total = max(0, int(total_bytes))
        free = min(max(0, int(free_bytes)), total)
        used = total - free
        percent = (used / total) * 100 if total else 0.0
        return cls(total_bytes=total, free_bytes=free, used_bytes=used, usage_percent=percent)


@dataclass(frozen=True, slots=True)
class OSInfo:
    platform: Platform = Platform.OTHER
    kernel_type: str = UNKNOWN
    release_version: str = UNKNOWN
    hostname: str = UNKNOWN
    uptime_seconds: int = 0


@dataclass(frozen=True, slots=True)
class NetworkAddress:
    ip: str
    netmask: str
    family: int  # 4 or 6
    mac: str
    is_internal: bool


@dataclass(frozen=True, slots=True)
class NetworkInterface:
    name: str
    addresses: tuple[NetworkAddress, ...] = ()

    def primary_external_ipv4(self) -> NetworkAddress | None:
        for address in self.addresses:
            if address.family == 4 and not address.is_internal and address.ip:
                return address
        return None


@dataclass(frozen=True, slots=True)
class NetworkInfo:
    interfaces: tuple[NetworkInterface, ...] = ()


@dataclass(frozen=True, slots=True)
class SystemSnapshot:
    cpu: CPUInfo
    memory: MemoryInfo
    os: OSInfo
    network: NetworkInfo
    captured_at_epoch_ms: int
    error: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-serialisable representation keeping every field name."""

        data = asdict(self)
        data["os"]["platform"] = self.os.platform.value
        return data
