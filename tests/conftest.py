"""Shared fixtures for System Monitor tests."""

import pytest

from system_monitor.models import (
    CPUInfo,
    MemoryInfo,
    NetworkAddress,
    NetworkInfo,
    NetworkInterface,
    OSInfo,
    Platform,
    SystemSnapshot,
)

GIB = 1024 ** 3


def make_snapshot(**overrides) -> SystemSnapshot:
    values = dict(
        cpu=CPUInfo(
            model="Intel(R) Core(TM) i7-9700K CPU @ 3.60GHz",
            core_count=8,
            architecture="x86_64",
            usage_percent=37.5,
            load_average=(1.25, 0.8, 0.5),
            clock_speed_mhz=3600,
        ),
        memory=MemoryInfo.from_totals(16 * GIB, 4 * GIB),
        os=OSInfo(
            platform=Platform.LINUX,
            kernel_type="Linux",
            release_version="6.5.0-14-generic",
            hostname="workstation",
            uptime_seconds=7200,
        ),
        network=NetworkInfo(
            interfaces=(
                NetworkInterface(
                    name="lo",
                    addresses=(
                        NetworkAddress("127.0.0.1", "255.0.0.0", 4, "00:00:00:00:00:00", True),
                        NetworkAddress("::1", "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff", 6, "00:00:00:00:00:00", True),
                    ),
                ),
                NetworkInterface(
                    name="eth0",
                    addresses=(
                        NetworkAddress("192.168.1.20", "255.255.255.0", 4, "aa:bb:cc:dd:ee:ff", False),
                        NetworkAddress("fe80::1", "ffff:ffff:ffff:ffff::", 6, "aa:bb:cc:dd:ee:ff", False),
                    ),
                ),
            )
        ),
        captured_at_epoch_ms=1_700_000_000_000,
    )
    values.update(overrides)
    return SystemSnapshot(**values)


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def snapshot_factory():
    return make_snapshot
