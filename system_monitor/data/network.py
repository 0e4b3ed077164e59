"""Network interface and address collection."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, Iterable, Mapping

import psutil

from system_monitor.models import NetworkAddress, NetworkInfo, NetworkInterface

EMPTY_MAC = "00:00:00:00:00:00"

_FAMILIES = {
    socket.AF_INET: 4,
    socket.AF_INET6: 6,
}


def _is_internal(ip: str) -> bool:
    try:
        return ipaddress.ip_address(ip.split("%", 1)[0]).is_loopback
    except ValueError:
        return False


def _interface_mac(entries: Iterable[Any]) -> str:
    for entry in entries:
        if entry.family == psutil.AF_LINK and entry.address:
            return str(entry.address).replace("-", ":").lower()
    return EMPTY_MAC


def build_interfaces(addrs: Mapping[str, list[Any]]) -> tuple[NetworkInterface, ...]:
    """Translate ``psutil.net_if_addrs()`` output, keeping every interface."""

    interfaces: list[NetworkInterface] = []
    for name, entries in addrs.items():
        mac = _interface_mac(entries)
        addresses: list[NetworkAddress] = []
        for entry in entries:
            family = _FAMILIES.get(entry.family)
            if family is None:
                continue
            ip = str(entry.address)
            addresses.append(
                NetworkAddress(
                    ip=ip,
                    netmask=str(entry.netmask or ""),
                    family=family,
                    mac=mac,
                    is_internal=_is_internal(ip),
                )
            )
        interfaces.append(NetworkInterface(name=name, addresses=tuple(addresses)))
    return tuple(interfaces)


def collect_network_info() -> NetworkInfo:
    return NetworkInfo(interfaces=build_interfaces(psutil.net_if_addrs()))
