"""Arranca System Monitor en un puerto libre y verifica las invariantes del snapshot."""

from __future__ import annotations

import json
import math
import sys
import threading
import urllib.request
from pathlib import Path
from typing import Any, Callable


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from system_monitor.core.config import INTERVALS
from system_monitor.web.server import create_app


def fetch(url: str) -> str:
    with urllib.request.urlopen(url, timeout=10) as response:  # nosec - servidor local
        return response.read().decode("utf-8")


def check_cpu(snapshot: dict[str, Any]) -> None:
    cpu = snapshot["cpu"]
    assert 0.0 <= cpu["usage_percent"] <= 100.0, f"usage_percent fuera de rango: {cpu['usage_percent']}"
    load = cpu["load_average"]
    assert len(load) == 3, f"load_average debe tener 3 valores: {load}"
    assert all(math.isfinite(value) and value >= 0 for value in load), f"load_average invalido: {load}"
    assert cpu["core_count"] >= 1, "core_count debe ser >= 1"


def check_memory(snapshot: dict[str, Any]) -> None:
    memory = snapshot["memory"]
    assert 0 <= memory["free_bytes"] <= memory["total_bytes"], "free_bytes fuera de rango"
    assert memory["used_bytes"] == memory["total_bytes"] - memory["free_bytes"], "used_bytes inconsistente"


def check_network(snapshot: dict[str, Any]) -> None:
    for interface in snapshot["network"]["interfaces"]:
        for address in interface["addresses"]:
            assert address["family"] in (4, 6), f"familia desconocida en {interface['name']}"


CHECKS: tuple[Callable[[dict[str, Any]], None], ...] = (check_cpu, check_memory, check_network)


def run_smoke() -> int:
    server = create_app(port=0)
    address = server.server_address()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        snapshot = json.loads(fetch(f"{address}/api/system"))
        for check in CHECKS:
            check(snapshot)
        page = fetch(f"{address}/")
        assert f"window.POLL_INTERVAL_MS = {INTERVALS.dashboard_poll_ms};" in page, "dashboard sin intervalo"
    except AssertionError as exc:
        print(f"SMOKE_FAIL {address}: {exc}")
        return 1
    finally:
        server.stop()
        thread.join(timeout=5)

    print(
        "SMOKE_OK",
        {
            "cpu_usage": snapshot["cpu"]["usage_percent"],
            "load_average": snapshot["cpu"]["load_average"],
            "error": snapshot["error"],
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(run_smoke())
