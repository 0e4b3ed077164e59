"""Data provider package."""

from .cpu_usage import (
    CpuCounters,
    CpuUsageStrategy,
    ProcStatCpuUsage,
    TopCpuUsage,
    WmicCpuUsage,
    select_cpu_usage_strategy,
)
from .load_average import (
    LoadAverageStrategy,
    NativeLoadAverage,
    SyntheticLoadAverage,
    select_load_average_strategy,
)
from .memory import collect_memory_info
from .network import collect_network_info
from .sampler import MetricsSampler
from .system import collect_cpu_info, collect_os_info

__all__ = [
    "CpuCounters",
    "CpuUsageStrategy",
    "LoadAverageStrategy",
    "MetricsSampler",
    "NativeLoadAverage",
    "ProcStatCpuUsage",
    "SyntheticLoadAverage",
    "TopCpuUsage",
    "WmicCpuUsage",
    "collect_cpu_info",
    "collect_memory_info",
    "collect_network_info",
    "collect_os_info",
    "select_cpu_usage_strategy",
    "select_load_average_strategy",
]
