"""Tests for load average strategies."""

import math
from unittest.mock import MagicMock, patch

import pytest

from system_monitor.data.load_average import (
    NativeLoadAverage,
    SyntheticLoadAverage,
    count_processes,
    sanitize_load,
    select_load_average_strategy,
)
from system_monitor.models import Platform


class TestSanitizeLoad:
    def test_passthrough(self):
        assert sanitize_load([1.5, 1.0, 0.5]) == (1.5, 1.0, 0.5)

    def test_non_finite_and_negative(self):
        assert sanitize_load([math.nan, math.inf, -1.0]) == (0.0, 0.0, 0.0)

    def test_pads_short_sequences(self):
        assert sanitize_load([2.0]) == (2.0, 0.0, 0.0)

    def test_ignores_extra_values(self):
        assert sanitize_load([1.0, 2.0, 3.0, 4.0]) == (1.0, 2.0, 3.0)

    def test_non_numeric(self):
        assert sanitize_load(["high", None, 0.25]) == (0.0, 0.0, 0.25)


class TestNativeLoadAverage:
    def test_uses_injected_source(self):
        strategy = NativeLoadAverage(getloadavg=lambda: (0.5, 0.25, 0.125))
        assert strategy.measure() == (0.5, 0.25, 0.125)

    def test_defaults_to_os_getloadavg(self):
        with patch("system_monitor.data.load_average.os") as mock_os:
            mock_os.getloadavg.return_value = (3.0, 2.0, 1.0)
            assert NativeLoadAverage().measure() == (3.0, 2.0, 1.0)

    def test_unavailable_source_raises(self):
        strategy = NativeLoadAverage(getloadavg=MagicMock(side_effect=OSError("no loadavg")))
        with pytest.raises(OSError):
            strategy.measure()


class TestSyntheticLoadAverage:
    def test_formula_and_decay(self):
        strategy = SyntheticLoadAverage(
            cpu_usage=lambda: 50.0,
            core_count=4,
            process_count=lambda: 200,
        )
        one, five, fifteen = strategy.measure()
        assert one == pytest.approx(2.5)
        assert five == pytest.approx(2.0)
        assert fifteen == pytest.approx(1.5)

    def test_values_are_capped(self):
        strategy = SyntheticLoadAverage(
            cpu_usage=lambda: 100.0,
            core_count=1,
            process_count=lambda: 100_000,
        )
        assert tuple(strategy.measure()) == (100.0, 100.0, 100.0)

    def test_idle_cpu_yields_zero(self):
        strategy = SyntheticLoadAverage(
            cpu_usage=lambda: 0.0,
            core_count=8,
            process_count=lambda: 350,
        )
        assert tuple(strategy.measure()) == (0.0, 0.0, 0.0)

    def test_counts_processes_with_psutil(self):
        with patch("system_monitor.data.load_average.psutil.pids", return_value=list(range(42))):
            assert count_processes() == 42


class TestStrategySelection:
    @pytest.mark.parametrize(
        "platform, expected",
        [
            (Platform.LINUX, NativeLoadAverage),
            (Platform.MACOS, NativeLoadAverage),
            (Platform.OTHER, NativeLoadAverage),
            (Platform.WINDOWS, SyntheticLoadAverage),
        ],
    )
    def test_selects_by_platform(self, platform, expected):
        strategy = select_load_average_strategy(platform, cpu_usage=lambda: 0.0, core_count=4)
        assert isinstance(strategy, expected)
