"""1/5/15 minute load average, native or synthesised on Windows."""

from __future__ import annotations

import math
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

import psutil

from system_monitor.models import Platform

LoadTriple = tuple[float, float, float]

# Heuristic carried over for compatibility; not a real exponential decay.
_SYNTHETIC_DECAY = (1.0, 0.8, 0.6)
_SYNTHETIC_CAP = 100.0
_PROCESSES_PER_CORE = 10


def sanitize_load(values: Sequence[float]) -> LoadTriple:
    """Coerce to three finite, non-negative floats."""

    cleaned: list[float] = []
    for value in list(values)[:3]:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = 0.0
        if not math.isfinite(number) or number < 0:
            number = 0.0
        cleaned.append(number)
    cleaned.extend([0.0] * (3 - len(cleaned)))
    return cleaned[0], cleaned[1], cleaned[2]


def count_processes() -> int:
    return len(psutil.pids())


class LoadAverageStrategy(ABC):
    name: str = "base"

    @abstractmethod
    def measure(self) -> Sequence[float]:
        """Return raw 1/5/15 minute values; may raise on collector failure."""


class NativeLoadAverage(LoadAverageStrategy):
    """Uses the kernel's own load tracking (Linux, macOS, BSD)."""

    name = "native"

    def __init__(self, getloadavg: Callable[[], Sequence[float]] | None = None) -> None:
        self._getloadavg = getloadavg

    def measure(self) -> Sequence[float]:
        # os.getloadavg is absent on Windows, resolve lazily
        getloadavg = self._getloadavg or os.getloadavg
        return tuple(getloadavg())


class SyntheticLoadAverage(LoadAverageStrategy):
    """Approximates load from CPU usage and process count.

    Windows has no load average, so ``(cpu/100) * processes / (cores * 10)``
    stands in for the 1 minute value and the 5/15 minute values are fixed
    fractions of it.
    """

    name = "synthetic"

    def __init__(
        self,
        *,
        cpu_usage: Callable[[], float],
        core_count: int,
        process_count: Callable[[], int] = count_processes,
    ) -> None:
        self._cpu_usage = cpu_usage
        self._core_count = max(1, int(core_count))
        self._process_count = process_count

    def measure(self) -> Sequence[float]:
        usage = float(self._cpu_usage())
        processes = int(self._process_count())
        load = (usage / 100) * (processes / (self._core_count * _PROCESSES_PER_CORE))
        return tuple(min(load * factor, _SYNTHETIC_CAP) for factor in _SYNTHETIC_DECAY)


def select_load_average_strategy(
    platform: Platform,
    *,
    cpu_usage: Callable[[], float],
    core_count: int,
) -> LoadAverageStrategy:
    if not platform.is_unix_like:
        return SyntheticLoadAverage(cpu_usage=cpu_usage, core_count=core_count)
    return NativeLoadAverage()
