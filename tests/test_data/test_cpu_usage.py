"""Tests for the CPU usage strategies."""

import math
import random
import subprocess
from unittest.mock import MagicMock

import pytest

from system_monitor.core.config import SamplerConfig
from system_monitor.data.cpu_usage import (
    CpuCounters,
    ProcStatCpuUsage,
    TopCpuUsage,
    WmicCpuUsage,
    clamp_percent,
    parse_top_output,
    parse_wmic_output,
    select_cpu_usage_strategy,
    usage_from_counters,
    usage_from_load_average,
)
from system_monitor.models import Platform

PROC_STAT_1 = "cpu  100 0 50 850\ncpu0 50 0 25 425\nintr 12345\n"
PROC_STAT_2 = "cpu  120 0 60 900\ncpu0 60 0 30 450\nintr 12400\n"

TOP_OUTPUT = """Processes: 412 total, 2 running, 410 sleeping, 1834 threads
Load Avg: 1.92, 2.10, 2.25
CPU usage: 12.34% user, 5.67% sys, 81.99% idle
SharedLibs: 512M resident, 89M data, 41M linkedit.
"""

WMIC_OUTPUT = "LoadPercentage  \r\r\n37              \r\r\n\r\r\n"


class TestCpuCounters:
    def test_parses_aggregate_line(self):
        counters = CpuCounters.parse(PROC_STAT_1)
        assert counters == CpuCounters(user=100, nice=0, system=50, idle=850)
        assert counters.total == 1000

    def test_parses_extended_fields(self):
        line = "cpu  10 1 5 80 2 1 1 0 3 0\n"
        counters = CpuCounters.parse(line)
        assert counters.iowait == 2
        assert counters.steal == 0
        # guest columns are not added to the total
        assert counters.total == 100

    def test_missing_aggregate_line(self):
        with pytest.raises(ValueError):
            CpuCounters.parse("cpu0 1 2 3 4\n")


class TestUsageFromCounters:
    def test_idle_share_of_elapsed_time(self):
        before = CpuCounters(user=100, nice=0, system=50, idle=850)
        after = CpuCounters(user=120, nice=0, system=60, idle=900)
        # total advances by 80, idle by 50
        assert usage_from_counters(before, after) == pytest.approx(37.5)

    def test_busy_majority(self):
        before = CpuCounters(user=100, nice=0, system=50, idle=850)
        after = CpuCounters(user=160, nice=0, system=80, idle=900)
        # total advances by 140, idle by 50
        assert usage_from_counters(before, after) == pytest.approx(64.29, abs=0.01)

    def test_zero_delta_returns_none(self):
        counters = CpuCounters(user=100, nice=0, system=50, idle=850)
        assert usage_from_counters(counters, counters) is None

    def test_counter_wrap_returns_none(self):
        before = CpuCounters(user=500, nice=0, system=500, idle=500)
        after = CpuCounters(user=10, nice=0, system=10, idle=10)
        assert usage_from_counters(before, after) is None

    def test_randomized_counters_stay_in_range(self):
        rng = random.Random(20240501)
        for _ in range(500):
            before = CpuCounters(*(rng.randint(-1000, 10 ** 6) for _ in range(4)))
            after = CpuCounters(*(rng.randint(-1000, 10 ** 6) for _ in range(4)))
            usage = usage_from_counters(before, after)
            assert usage is None or 0.0 <= usage <= 100.0


class TestClamp:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (-5.0, 0.0),
            (150.0, 100.0),
            (42.5, 42.5),
            (math.nan, 0.0),
            (math.inf, 0.0),
            (-math.inf, 0.0),
            ("not-a-number", 0.0),
        ],
    )
    def test_clamp_percent(self, value, expected):
        assert clamp_percent(value) == expected

    def test_load_average_approximation(self):
        assert usage_from_load_average([2.0, 1.5, 1.0], 4) == 50.0

    def test_load_average_approximation_clamped(self):
        assert usage_from_load_average([16.0, 8.0, 4.0], 4) == 100.0

    def test_load_average_approximation_zero_cores(self):
        assert usage_from_load_average([0.5, 0.0, 0.0], 0) == 50.0


class TestProcStatCpuUsage:
    def test_two_samples_with_sleep(self):
        read_stat = MagicMock(side_effect=[PROC_STAT_1, PROC_STAT_2])
        sleep = MagicMock()
        strategy = ProcStatCpuUsage(
            load_average=MagicMock(return_value=(0.0, 0.0, 0.0)),
            core_count=4,
            read_stat=read_stat,
            sleep=sleep,
            config=SamplerConfig(cpu_sample_interval=0.1),
        )

        assert strategy.measure() == pytest.approx(37.5)
        sleep.assert_called_once_with(0.1)
        assert read_stat.call_count == 2

    def test_zero_delta_falls_back_to_load_average(self):
        load_average = MagicMock(return_value=(2.0, 1.5, 1.0))
        strategy = ProcStatCpuUsage(
            load_average=load_average,
            core_count=4,
            read_stat=MagicMock(return_value=PROC_STAT_1),
            sleep=MagicMock(),
        )

        assert strategy.measure() == 50.0
        load_average.assert_called_once()

    def test_unreadable_counters_fall_back_to_load_average(self):
        strategy = ProcStatCpuUsage(
            load_average=MagicMock(return_value=(2.0, 1.5, 1.0)),
            core_count=4,
            read_stat=MagicMock(side_effect=PermissionError("denied")),
            sleep=MagicMock(),
        )

        assert strategy.measure() == 50.0

    def test_garbage_counters_fall_back_to_load_average(self):
        strategy = ProcStatCpuUsage(
            load_average=MagicMock(return_value=(1.0, 1.0, 1.0)),
            core_count=2,
            read_stat=MagicMock(return_value="cpu  a b c d\n"),
            sleep=MagicMock(),
        )

        assert strategy.measure() == 50.0


class TestTopCpuUsage:
    def test_parse_user_field(self):
        assert parse_top_output(TOP_OUTPUT) == pytest.approx(12.34)

    def test_parse_without_match(self):
        with pytest.raises(ValueError):
            parse_top_output("CPU usage: n/a\n")

    def test_runs_top_once(self):
        runner = MagicMock(return_value=TOP_OUTPUT)
        strategy = TopCpuUsage(runner=runner, config=SamplerConfig(command_timeout=2.0))

        assert strategy.measure() == pytest.approx(12.34)
        runner.assert_called_once_with(["top", "-l", "1"], 2.0)


class TestWmicCpuUsage:
    def test_parse_first_numeric_row(self):
        assert parse_wmic_output(WMIC_OUTPUT) == 37.0

    def test_parse_multi_socket_takes_first(self):
        assert parse_wmic_output("LoadPercentage\n12\n80\n") == 12.0

    def test_parse_header_only(self):
        with pytest.raises(ValueError):
            parse_wmic_output("LoadPercentage\n\n")

    def test_runner_failure_propagates(self):
        runner = MagicMock(side_effect=subprocess.CalledProcessError(1, "wmic"))
        strategy = WmicCpuUsage(runner=runner)

        with pytest.raises(subprocess.CalledProcessError):
            strategy.measure()

    def test_runs_wmic(self):
        runner = MagicMock(return_value=WMIC_OUTPUT)
        strategy = WmicCpuUsage(runner=runner, config=SamplerConfig(command_timeout=3.0))

        assert strategy.measure() == 37.0
        runner.assert_called_once_with(["wmic", "cpu", "get", "LoadPercentage"], 3.0)


class TestStrategySelection:
    @pytest.mark.parametrize(
        "platform, expected",
        [
            (Platform.LINUX, ProcStatCpuUsage),
            (Platform.OTHER, ProcStatCpuUsage),
            (Platform.MACOS, TopCpuUsage),
            (Platform.WINDOWS, WmicCpuUsage),
        ],
    )
    def test_selects_by_platform(self, platform, expected):
        strategy = select_cpu_usage_strategy(
            platform,
            load_average=lambda: (0.0, 0.0, 0.0),
            core_count=2,
        )
        assert isinstance(strategy, expected)
