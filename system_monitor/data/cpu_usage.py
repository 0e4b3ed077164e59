"""Instantaneous CPU utilisation strategies, one per platform family."""

from __future__ import annotations

import logging
import math
import re
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from system_monitor.core.config import SAMPLER, SamplerConfig
from system_monitor.models import Platform

logger = logging.getLogger(__name__)

_PROC_STAT = Path("/proc/stat")
# Locale dependent: assumes the English "12.34% user" layout of ``top -l 1``.
_TOP_USER_PATTERN = re.compile(r"(\d+\.\d+)%\s+user")

CommandRunner = Callable[[Sequence[str], float], str]
LoadAverageSource = Callable[[], Sequence[float]]


def clamp_percent(value: float) -> float:
    """Clamp ``value`` into ``[0, 100]``; non-finite values become 0."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(max(0.0, number), 100.0)


def run_command(args: Sequence[str], timeout: float) -> str:
    completed = subprocess.run(
        list(args),
        capture_output=True,
        text=True,
        timeout=timeout,
        check=True,
    )
    return completed.stdout


@dataclass(frozen=True, slots=True)
class CpuCounters:
    """Cumulative jiffies from the aggregate ``cpu`` line of /proc/stat."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0

    @property
    def total(self) -> int:
        # guest/guest_nice are already folded into user/nice by the kernel
        return (
            self.user + self.nice + self.system + self.idle
            + self.iowait + self.irq + self.softirq + self.steal
        )

    @classmethod
    def parse(cls, stat_text: str) -> "CpuCounters":
        for line in stat_text.splitlines():
            fields = line.split()
            if not fields or fields[0] != "cpu":
                continue
            values = [int(value) for value in fields[1:9]]
            if len(values) < 4:
                break
            return cls(*values)
        raise ValueError("aggregate cpu line not found in /proc/stat")


def usage_from_counters(before: CpuCounters, after: CpuCounters) -> float | None:
    """Return busy percentage between two samples, or ``None`` if no time elapsed."""

    total_delta = after.total - before.total
    if total_delta <= 0:
        return None
    idle_delta = after.idle - before.idle
    return clamp_percent(100 - (100 * idle_delta) / total_delta)


def usage_from_load_average(load_average: Sequence[float], core_count: int) -> float:
    """Approximate utilisation from the 1 minute load average."""

    cores = max(1, int(core_count))
    return clamp_percent((float(load_average[0]) / cores) * 100)


def parse_top_output(output: str) -> float:
    for line in output.splitlines():
        if "CPU usage" not in line:
            continue
        match = _TOP_USER_PATTERN.search(line)
        if match:
            return float(match.group(1))
    raise ValueError("no user CPU field in top output")


def parse_wmic_output(output: str) -> float:
    # first line is the "LoadPercentage" header, one row per socket follows
    for line in output.strip().splitlines()[1:]:
        text = line.strip()
        if text.isdigit():
            return float(text)
    raise ValueError("no numeric LoadPercentage row in wmic output")


class CpuUsageStrategy(ABC):
    """Measures current CPU utilisation as a percentage."""

    name: str = "base"

    @abstractmethod
    def measure(self) -> float:
        """Return the raw utilisation; may raise on collector failure."""


class ProcStatCpuUsage(CpuUsageStrategy):
    """Differential sampling of /proc/stat with a load-average fallback."""

    name = "proc_stat"

    def __init__(
        self,
        *,
        load_average: LoadAverageSource,
        core_count: int,
        read_stat: Callable[[], str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        config: SamplerConfig = SAMPLER,
    ) -> None:
        self._load_average = load_average
        self._core_count = core_count
        self._read_stat = read_stat or self._read_proc_stat
        self._sleep = sleep
        self._interval = config.cpu_sample_interval

    @staticmethod
    def _read_proc_stat() -> str:
        return _PROC_STAT.read_text(encoding="utf-8")

    def measure(self) -> float:
        try:
            before = CpuCounters.parse(self._read_stat())
            self._sleep(self._interval)
            after = CpuCounters.parse(self._read_stat())
        except (OSError, ValueError) as exc:
            logger.warning("Contadores de CPU no disponibles (%s); usando carga media", exc)
            return self._fallback()
        usage = usage_from_counters(before, after)
        if usage is None:
            logger.debug("Sin avance en los contadores de CPU; usando carga media")
            return self._fallback()
        return usage

    def _fallback(self) -> float:
        return usage_from_load_average(self._load_average(), self._core_count)


class TopCpuUsage(CpuUsageStrategy):
    """Reads the user CPU share reported by ``top -l 1`` on macOS."""

    name = "top"

    def __init__(self, *, runner: CommandRunner = run_command, config: SamplerConfig = SAMPLER) -> None:
        self._runner = runner
        self._timeout = config.command_timeout

    def measure(self) -> float:
        return parse_top_output(self._runner(["top", "-l", "1"], self._timeout))


class WmicCpuUsage(CpuUsageStrategy):
    """Reads ``LoadPercentage`` from WMI on Windows."""

    name = "wmic"

    def __init__(self, *, runner: CommandRunner = run_command, config: SamplerConfig = SAMPLER) -> None:
        self._runner = runner
        self._timeout = config.command_timeout

    def measure(self) -> float:
        return parse_wmic_output(self._runner(["wmic", "cpu", "get", "LoadPercentage"], self._timeout))


def select_cpu_usage_strategy(
    platform: Platform,
    *,
    load_average: LoadAverageSource,
    core_count: int,
    sleep: Callable[[float], None] = time.sleep,
    runner: CommandRunner = run_command,
    config: SamplerConfig = SAMPLER,
) -> CpuUsageStrategy:
    if platform is Platform.WINDOWS:
        return WmicCpuUsage(runner=runner, config=config)
    if platform is Platform.MACOS:
        return TopCpuUsage(runner=runner, config=config)
    return ProcStatCpuUsage(
        load_average=load_average,
        core_count=core_count,
        sleep=sleep,
        config=config,
    )
