"""Point-in-time snapshot assembly with per-collector failure isolation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from system_monitor.core.config import SAMPLER, SamplerConfig
from system_monitor.models import (
    CPUInfo,
    MemoryInfo,
    NetworkInfo,
    OSInfo,
    Platform,
    SystemSnapshot,
)

from .cpu_usage import CpuUsageStrategy, clamp_percent, select_cpu_usage_strategy
from .load_average import LoadAverageStrategy, LoadTriple, sanitize_load, select_load_average_strategy
from .memory import collect_memory_info
from .network import collect_network_info
from .system import collect_cpu_info, collect_os_info, detect_core_count

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MetricsSampler:
    """Produces one :class:`SystemSnapshot` per :meth:`sample` call.

    Platform and core count are taken as constructor inputs so that the
    platform-specific strategies are chosen once and can be faked in tests.
    The instance holds no mutable state, so concurrent ``sample()`` calls
    from different request threads do not interfere with each other.
    """

    def __init__(
        self,
        *,
        platform: Platform | None = None,
        core_count: int | None = None,
        cpu_strategy: CpuUsageStrategy | None = None,
        load_strategy: LoadAverageStrategy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        config: SamplerConfig = SAMPLER,
        collectors: dict[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.platform = platform or Platform.detect()
        self.core_count = max(1, core_count or detect_core_count())
        self._clock = clock
        self._collectors: dict[str, Callable[..., Any]] = {
            "cpu": collect_cpu_info,
            "memory": collect_memory_info,
            "os": collect_os_info,
            "network": collect_network_info,
        }
        if collectors:
            self._collectors.update(collectors)

        self._load_strategy = load_strategy or select_load_average_strategy(
            self.platform,
            cpu_usage=self.get_cpu_usage_percent,
            core_count=self.core_count,
        )
        self._cpu_strategy = cpu_strategy or select_cpu_usage_strategy(
            self.platform,
            load_average=self.get_load_average,
            core_count=self.core_count,
            sleep=sleep,
            config=config,
        )
        logger.debug(
            "Sampler para %s: cpu=%s carga=%s",
            self.platform.value,
            self._cpu_strategy.name,
            self._load_strategy.name,
        )

    def get_cpu_usage_percent(self) -> float:
        try:
            usage = self._cpu_strategy.measure()
        except Exception as exc:
            logger.warning("Uso de CPU no disponible (%s): %s", self._cpu_strategy.name, exc)
            return 0.0
        return clamp_percent(usage)

    def get_load_average(self) -> LoadTriple:
        try:
            values = self._load_strategy.measure()
        except Exception as exc:
            logger.warning("Carga media no disponible (%s): %s", self._load_strategy.name, exc)
            return 0.0, 0.0, 0.0
        return sanitize_load(values)

    def sample(self) -> SystemSnapshot:
        errors: list[str] = []

        usage = self.get_cpu_usage_percent()
        load_average = self.get_load_average()

        cpu = self._safe_call("cpu", errors, CPUInfo(), self.core_count)
        memory = self._safe_call("memory", errors, MemoryInfo())
        os_info = self._safe_call("os", errors, OSInfo(platform=self.platform), self.platform)
        network = self._safe_call("network", errors, NetworkInfo())

        return SystemSnapshot(
            cpu=CPUInfo(
                model=cpu.model,
                core_count=max(1, cpu.core_count),
                architecture=cpu.architecture,
                usage_percent=usage,
                load_average=load_average,
                clock_speed_mhz=max(0, cpu.clock_speed_mhz),
            ),
            memory=memory,
            os=os_info,
            network=network,
            captured_at_epoch_ms=int(self._clock() * 1000),
            error="; ".join(errors) or None,
        )

    def _safe_call(self, key: str, errors: list[str], default: T, *args: Any) -> T:
        try:
            return self._collectors[key](*args)
        except Exception as exc:
            logger.exception("Proveedor '%s' falló durante la recolección", key, exc_info=exc)
            errors.append(f"{key}: {exc}")
            return default
